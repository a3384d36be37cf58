"""Print ranked taxonomic relations of a term.

Usage:
    python query_taxonomy.py hypernyms traffic jam
    python query_taxonomy.py hyponyms dog
    python query_taxonomy.py cohyponyms cat
    python query_taxonomy.py expanded traffic jam

Settings are read from TAXONOMIST_* environment variables.
"""

import sys

from taxonomist import TaxonomistSettings, TaxonomyReader

RELATIONS = ("hypernyms", "hyponyms", "cohyponyms", "expanded")

# Co-hyponyms used to broaden the "expanded" query
EXPANSION_SIZE = 10


def main() -> None:
    if len(sys.argv) < 3 or sys.argv[1] not in RELATIONS:
        print(__doc__)
        return

    relation, tokens = sys.argv[1], sys.argv[2:]
    settings = TaxonomistSettings.from_env()
    reader = TaxonomyReader.from_settings(settings)

    if relation == "hypernyms":
        results = reader.get_ranked_hypernyms(tokens, settings.lemmatize)
    elif relation == "hyponyms":
        results = reader.get_ranked_hyponyms(tokens, settings.lemmatize)
    elif relation == "cohyponyms":
        results = reader.get_ranked_cohyponyms(tokens, settings.lemmatize)
    else:
        results = reader.get_expanded_hypernyms(tokens, EXPANSION_SIZE, settings.lemmatize)

    print("=" * 60)
    print(f"{relation.upper()} OF '{' '.join(tokens)}' ({len(results)} results)")
    print("=" * 60)
    for match in results:
        print(f"{match.score:8.4f}  {match.surface}  (count={match.count}, sim={match.similarity:.4f})")
        for evidence in match.evidence:
            print(f"            [{evidence.document_id}] {evidence.sentence}")


if __name__ == "__main__":
    main()
