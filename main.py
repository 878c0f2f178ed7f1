# -*- coding: utf-8 -*-
"""Bootstrap da aplicação: ``python main.py [DESTINO] [opções]``.

Equivale a ``opz-backup`` / ``python -m opz_backup``.
"""
import sys


if __name__ == "__main__":
    from opz_backup.cli import main
    sys.exit(main())
