"""
Réencodage optionnel des valeurs texte et binaires.

Les fichiers Access anciens stockent souvent leurs chaînes dans une page de
code (cp1252, cp850, koi8-r...). Le lecteur ODBC les restitue octet pour
octet ; EncodingSpec les réinterprète avec le codec choisi par l'utilisateur.
"""

import codecs
from dataclasses import dataclass
from encodings.aliases import aliases
from typing import Any, List, Optional

from .errors import ConfigurationError
from .models import ColumnType, LegacyType

# Codecs de transformation (bytes -> bytes) qui ne décrivent pas un jeu de caractères
_NON_TEXT_CODECS = {"base64", "bz2", "hex", "quopri", "rot-13", "uu", "zlib"}

# Octet <-> point de code, sans perte pour les valeurs 0-255
_BYTE_CARRIER = "latin-1"


def available_encodings() -> List[str]:
    """Retourne la liste triée des encodages utilisables."""
    names = set()
    for name in set(aliases.values()):
        try:
            info = codecs.lookup(name)
        except LookupError:
            continue
        if info.name not in _NON_TEXT_CODECS:
            names.add(info.name)
    return sorted(names)


def encoding_by_name(name: str) -> str:
    """
    Normalise un nom d'encodage (insensible à la casse).

    Raises:
        ConfigurationError: Si l'encodage n'existe pas
    """
    try:
        info = codecs.lookup(name.strip().lower().replace(" ", "-"))
    except LookupError:
        raise ConfigurationError(f"l'encodage {name!r} n'existe pas") from None
    if info.name in _NON_TEXT_CODECS:
        raise ConfigurationError(f"{name!r} n'est pas un encodage de caractères")
    return info.name


@dataclass(frozen=True)
class EncodingSpec:
    """Codecs à appliquer aux colonnes texte et binaires."""

    text: Optional[str] = None
    blob: Optional[str] = None

    @property
    def enabled(self) -> bool:
        return self.text is not None or self.blob is not None

    def decode_text(self, value: Any) -> str:
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value).decode(self.text)
        return value.encode(_BYTE_CARRIER).decode(self.text)

    def decode_blob(self, value: Any) -> bytes:
        if isinstance(value, str):
            value = value.encode(_BYTE_CARRIER)
        return bytes(value).decode(self.blob).encode("utf-8")

    def apply(self, column_type: ColumnType, value: Any) -> Any:
        """
        Décode une valeur selon le type de sa colonne.

        Les valeurs nulles, les types non textuels et les colonnes sans codec
        configuré sont retournés inchangés.
        Un type brut ("Text", "LongBinary"...) est traité comme le membre de
        LegacyType du même nom ; un type inconnu laisse la valeur inchangée.
        """
        if value is None:
            return value
        try:
            column_type = LegacyType(column_type)
        except ValueError:
            return value
        if column_type.is_text:
            return value if self.text is None else self.decode_text(value)
        if column_type.is_binary:
            return value if self.blob is None else self.decode_blob(value)
        return value
