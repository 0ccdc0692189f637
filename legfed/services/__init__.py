"""
Service helpers.

Modules:
- sql_utils: schema prefixing and row fetching for raw chado SQL
- pubmed: NCBI PubMed ID lookup by journal, year and authors
"""
