"""
emissions/constants.py

Built-in configuration data for the attribution engine.

Both values are immutable and are injected into the calculator as defaults;
callers can substitute their own registry or factor table.
"""

from __future__ import annotations

from types import MappingProxyType

# Balancing authorities reporting to the EIA-930 Hourly Electric Grid Monitor.
# The order of this tuple is the index order of every vector and matrix built
# from the default registry.
DEFAULT_BALANCING_AUTHORITIES = (
    "AEC",
    "AECI",
    "AVA",
    "AVRN",
    "AZPS",
    "BANC",
    "BPAT",
    "CHPD",
    "CISO",
    "CPLE",
    "CPLW",
    "DEAA",
    "DOPD",
    "DUK",
    "EEI",
    "EPE",
    "ERCO",
    "FMPP",
    "FPC",
    "FPL",
    "GCPD",
    "GLHB",
    "GRID",
    "GRIF",
    "GVL",
    "GWA",
    "HGMA",
    "HST",
    "IID",
    "IPCO",
    "ISNE",
    "JEA",
    "LDWP",
    "LGEE",
    "MISO",
    "NEVP",
    "NWMT",
    "NYIS",
    "PACE",
    "PACW",
    "PGE",
    "PJM",
    "PNM",
    "PSCO",
    "PSEI",
    "SC",
    "SCEG",
    "SCL",
    "SEC",
    "SEPA",
    "SOCO",
    "SPA",
    "SRP",
    "SWPP",
    "TAL",
    "TEC",
    "TEPC",
    "TIDC",
    "TPWR",
    "TVA",
    "WACM",
    "WALC",
    "WAUW",
    "WWA",
    "YAD",
)

# Life-cycle CO2-equivalent emission factors (gCO2eq/kWh) keyed by EIA-930
# fuel type code. "NG" (natural gas) is reported upstream and is looked up
# under "GAS" so it cannot be confused with net generation.
CO2_EMISSIONS_FACTORS = MappingProxyType(
    {
        "WAT": 4,
        "NUC": 16,
        "SUN": 46,
        "GAS": 469,
        "WND": 12,
        "COL": 1000,
        "OIL": 840,
        "OTH": 439,
        "UNK": 439,
        "BIO": 230,
        "GEO": 42,
    }
)

# Fuel type aliases applied before factor lookup.
FUEL_TYPE_ALIASES = MappingProxyType({"NG": "GAS"})
