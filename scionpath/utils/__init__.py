"""Low-level helpers: bit fields and ISD-AS identifiers."""
