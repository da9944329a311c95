"""
Centralized path helpers (flat layout: assets/ and schema/ sit beside the package).
"""
from __future__ import annotations
from pathlib import Path

# This file lives at battlemon/core/paths.py
ROOT = Path(__file__).resolve().parents[2]   # project root (one up from 'battlemon')
ASSETS = ROOT / "assets"
DATA = ASSETS / "data"
DIALOGUE = ASSETS / "dialogue"
SCHEMA = ROOT / "schema"
CREATURES_TABLE = DATA / "creatures.csv"
MOVES_TABLE = DATA / "moves.csv"
ITEMS_TABLE = DATA / "items.csv"
