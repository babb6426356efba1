"""
SiteCost Modules.

Thin orchestration layers over the SiteCost kernel, engines and ingestion.
Each module contains:
- Domain models (the report nouns)
- Configuration schemas (policy and display settings)
- A service that wires ingestion, engines and assembly together

Modules:
- Reporting: site cost report documents, stats and renderers

Actual processing logic lives in the kernel and engines.
"""
