"""
LegFed Converter Tests

Test Organization:
- chado/: ChadoDBConverter and the chado processors, run against an
  in-memory SQLite database with the chado tables they query
- converters/: Flat-file, GFF, VCF and FASTA converters
- test_*.py: Items, writers, organisms, datastore helpers, SQL helpers,
  PubMed lookup and the command line

Running Tests:
    # Run all tests
    pytest tests/

    # Run only the chado tests
    pytest tests/chado/

    # Run with coverage
    pytest --cov=legfed tests/
"""
