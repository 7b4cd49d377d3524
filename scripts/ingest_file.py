"""
Queue a local file for ingestion from CLI.
"""

from __future__ import annotations

import argparse
import json
import os

from kusto_ingest import (
    DataFormat,
    FileSourceInfo,
    IngestionProperties,
    ReportLevel,
    ReportMethod,
    create_ingest_client,
)
from kusto_ingest.config import configure_logging


def _token_from_env() -> str:
    token = os.getenv("KUSTO_ACCESS_TOKEN", "").strip()
    if not token:
        raise SystemExit("KUSTO_ACCESS_TOKEN must be set to a bearer token for the endpoint.")
    return token


def main() -> int:
    parser = argparse.ArgumentParser(description="Queue a local file for ingestion.")
    parser.add_argument("path", help="Local file to ingest (.gz/.zip files are uploaded as-is).")
    parser.add_argument("--database", required=True)
    parser.add_argument("--table", required=True)
    parser.add_argument(
        "--format",
        dest="data_format",
        default=DataFormat.CSV.value,
        choices=[item.value for item in DataFormat],
    )
    parser.add_argument("--mapping", dest="mapping", default=None, help="Ingestion mapping reference.")
    parser.add_argument(
        "--report-method",
        dest="report_method",
        default=ReportMethod.QUEUE.name.lower(),
        choices=[item.name.lower() for item in ReportMethod],
    )
    parser.add_argument(
        "--report-level",
        dest="report_level",
        default=ReportLevel.FAILURES_ONLY.name.lower(),
        choices=[item.name.lower() for item in ReportLevel],
    )
    parser.add_argument("--flush-immediately", action="store_true")
    parser.add_argument("--endpoint", default=None, help="Overrides KUSTO_DM_ENDPOINT.")
    args = parser.parse_args()

    configure_logging()

    client = create_ingest_client(token_provider=_token_from_env, dm_endpoint=args.endpoint)
    properties = IngestionProperties(
        database=args.database,
        table=args.table,
        data_format=DataFormat(args.data_format),
        ingestion_mapping_reference=args.mapping,
        report_method=ReportMethod[args.report_method.upper()],
        report_level=ReportLevel[args.report_level.upper()],
        flush_immediately=args.flush_immediately,
    )
    result = client.ingest_from_file(FileSourceInfo(args.path), properties)

    payload = {
        "source_id": str(result.source_id),
        "report_method": result.report_method.name,
        "trackable": result.is_trackable,
    }
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
