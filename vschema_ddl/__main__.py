#!/usr/bin/env python3
"""
Entry point for running vschema_ddl as a module.
This file enables: python -m vschema_ddl
"""

import sys

from .main import main

if __name__ == '__main__':
    sys.exit(main())
