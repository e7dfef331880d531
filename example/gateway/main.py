"""
Minimal gateway example.

Usage:
    uvicorn example.gateway.main:app

    curl -X POST localhost:8000/graphql \
        -H 'content-type: application/json' \
        -d '{"query": "{ articles(limit: 5) { id title author { name } } }"}'
"""

from pathlib import Path

from dyngraph import DynGraphConfig, Gateway

gateway = Gateway(
    DynGraphConfig(
        schema_path=str(Path(__file__).with_name("schema.yaml")),
        data_service_url="http://data:8055",
    ),
)

app = gateway.app
