"""
dbc2bsm - convert CAN DBC message sets into beSTORM XML fuzzing modules.

Architecture:
- models: read-only message/signal records and frame layout types
- services: DBC loading (cantools), layout reconciliation, block emission
  and document assembly
- config: JSON/environment settings and logging setup
- main: command line entry point

Dependencies:
- cantools: DBC parsing
"""

__version__ = '0.1.0'
