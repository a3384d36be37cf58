"""Enrich a directory of ontology leaf files with hyponyms and co-hyponyms.

Settings come from a JSON file given on the command line, or from
TAXONOMIST_* environment variables (a .env file is honoured):

    python extend_ontology.py settings.json
    TAXONOMIST_ONTOLOGY_DIR=ontology TAXONOMIST_OUTPUT_DIR=out python extend_ontology.py
"""

import asyncio
import logging
import sys

from taxonomist import ConfigurationError, TaxonomistSettings, TaxonomyReader
from taxonomist.ontology import OntologyExtender

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
)


async def main() -> int:
    """Run the extender over the configured ontology directory."""
    try:
        if len(sys.argv) > 1:
            settings = TaxonomistSettings.from_file(sys.argv[1])
        else:
            settings = TaxonomistSettings.from_env()

        if not settings.ontology_dir or not settings.output_dir:
            raise ConfigurationError("ontology_dir and output_dir must both be set")

        reader = TaxonomyReader.from_settings(settings)
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        return 2

    extender = OntologyExtender.from_settings(reader, settings)
    summary = await extender.extend_directory(settings.ontology_dir, settings.output_dir)

    print("=" * 60)
    print("ONTOLOGY EXTENSION SUMMARY")
    print("=" * 60)
    print(f"Extended: {len(summary.succeeded)}")
    print(f"Failed:   {len(summary.failed)}")
    for report in summary.failed:
        print(f"  - {report.name}: {report.error}")
    return 0 if not summary.failed else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
