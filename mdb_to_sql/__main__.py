"""
Point d'entrée pour l'exécution en tant que module (-m).
Permet d'exécuter le package directement avec python -m mdb_to_sql
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
