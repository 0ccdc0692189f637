"""
LegFed InterMine data sources

Converters that read LegFed/LIS chado databases and datastore flat files
(GFF, FASTA, VCF and tab-delimited) and emit InterMine items.

Packages:
- core: Settings, errors and the organism repository
- db: Database engine and session management for the chado source
- items: Item model and item writers (the write-only sink)
- services: Raw SQL helpers and the PubMed lookup
- utils: Logging setup, GFF parsing and datastore helpers
- converters: Flat-file converters and the FASTA loader
- chado: The chado converter and its processors
- cli: Command-line interface

Usage:
    legfed file synteny-gff data/*.gff3 --output items.xml
    legfed chado --organisms "3885 3827_desi" --processors "genetic featureprop"
    legfed chado --organisms 3885 --homologue-organisms "3847 3702" --processors homology --phytozome-version phytozome_10_2

Environment Variables:
    DATABASE_URL: chado database connection URL
    DB_SCHEMA: chado schema name (optional)
    LOG_LEVEL: Logging level (default: INFO)
"""

__version__ = "0.1.0"
