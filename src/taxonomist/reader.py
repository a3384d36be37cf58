"""Taxonomy reader: ranked hypernyms, hyponyms and co-hyponyms from a corpus."""

import logging
from functools import reduce

from .config import TaxonomistSettings
from .consolidation import consolidate, head, tally, tally_heads, to_matches
from .corpus import CorpusClient, OdinsonClient
from .embeddings import EmbeddingStore, OpenAIEmbeddingStore, Word2VecEmbeddings
from .errors import ConfigurationError
from .lemmatizer import Lemmatizer, SpacyLemmatizer
from .patterns import PatternCompiler
from .schemas import (
    CompiledQuery,
    ConsolidatedMatch,
    Evidence,
    RawMatch,
    RelationKind,
    ScoredMatch,
)
from .similarity import SimilarityScorer

logger = logging.getLogger(__name__)


class TaxonomyReader:
    """
    Extract taxonomic relations of a term from an annotated corpus.

    Pipeline per request:
    1. Optionally lemmatize the query tokens
    2. Compile the relation's rule template into queries
    3. Execute every query against the corpus
    4. Consolidate hits by result tokens (counts and evidence)
    5. Rank against the query by embedding similarity and frequency
    """

    def __init__(
        self,
        corpus: CorpusClient,
        scorer: SimilarityScorer,
        compiler: PatternCompiler | None = None,
        lemmatizer: Lemmatizer | None = None,
        evidence_cap: int = 5,
    ):
        """
        Initialize the reader.

        Args:
            corpus: Client executing compiled queries
            scorer: Scores candidates against the query
            compiler: Rule template compiler (packaged rules if None)
            lemmatizer: Needed only when lemmatize=True is requested
            evidence_cap: Evidence sentences kept per candidate
        """
        self.corpus = corpus
        self.scorer = scorer
        self.compiler = compiler or PatternCompiler()
        self.lemmatizer = lemmatizer
        self.evidence_cap = evidence_cap

    @classmethod
    def from_settings(cls, settings: TaxonomistSettings) -> "TaxonomyReader":
        """Wire the default corpus client, embedding store and lemmatizer."""
        if settings.embeddings_backend == "openai":
            embeddings: EmbeddingStore = OpenAIEmbeddingStore(model=settings.embedding_model)
        else:
            if not settings.embeddings_path:
                raise ConfigurationError("embeddings_path is required for the word2vec backend")
            embeddings = Word2VecEmbeddings.load(settings.embeddings_path)

        return cls(
            corpus=OdinsonClient(settings.corpus_url, timeout=settings.corpus_timeout),
            scorer=SimilarityScorer(embeddings),
            compiler=PatternCompiler(settings.rules_dir),
            lemmatizer=SpacyLemmatizer(settings.spacy_model),
            evidence_cap=settings.evidence_cap,
        )

    # -------------------------------------------------------------------------
    # Relations
    # -------------------------------------------------------------------------

    def get_hypernyms(self, tokens: list[str], lemmatize: bool = False) -> list[ConsolidatedMatch]:
        return self._get_relation(tokens, RelationKind.HYPERNYM, lemmatize)

    def get_hyponyms(self, tokens: list[str], lemmatize: bool = False) -> list[ConsolidatedMatch]:
        return self._get_relation(tokens, RelationKind.HYPONYM, lemmatize)

    def get_cohyponyms(self, tokens: list[str], lemmatize: bool = False) -> list[ConsolidatedMatch]:
        return self._get_relation(tokens, RelationKind.COHYPONYM, lemmatize)

    def get_ranked_hypernyms(self, tokens: list[str], lemmatize: bool = False) -> list[ScoredMatch]:
        return self.scorer.rank(tokens, self.get_hypernyms(tokens, lemmatize))

    def get_ranked_hyponyms(self, tokens: list[str], lemmatize: bool = False) -> list[ScoredMatch]:
        return self.scorer.rank(tokens, self.get_hyponyms(tokens, lemmatize))

    def get_ranked_cohyponyms(self, tokens: list[str], lemmatize: bool = False) -> list[ScoredMatch]:
        return self.scorer.rank(tokens, self.get_cohyponyms(tokens, lemmatize))

    def get_expanded_hypernyms(
        self,
        pattern: list[str],
        n: int,
        lemmatize: bool = False,
    ) -> list[ScoredMatch]:
        """
        Hypernyms of a term, broadened through its closest co-hyponyms.

        1. Query set: the pattern plus its top-n ranked co-hyponyms
        2. Sum the counts of ranked hypernyms over the query set
        3. Add the head (last token) of every candidate
        4. Add the head of the pattern
        5. Re-rank everything against the pattern

        Args:
            pattern: Query token sequence
            n: Number of co-hyponyms used to broaden the query set
            lemmatize: Match query tokens by lemma

        Returns:
            Ranked hypernym candidates (without evidence)
        """
        queries = [list(pattern)]
        for cohyponym in self.get_ranked_cohyponyms(pattern, lemmatize)[: max(n, 0)]:
            if cohyponym.result not in queries:
                queries.append(cohyponym.result)
        logger.info(f"[EXPAND] {' '.join(pattern)!r}: {len(queries)} queries after broadening")

        counts = reduce(
            lambda acc, q: tally(acc, self.get_ranked_hypernyms(q, lemmatize)),
            queries,
            {},
        )
        counts = tally_heads(counts)
        counts = tally(counts, [ConsolidatedMatch(result=head(list(pattern)), count=1)])

        return self.scorer.rank(pattern, to_matches(counts))

    def execute_given_rules(
        self,
        tokens: list[str],
        rule_text: str,
        lemmatize: bool = False,
    ) -> list[ScoredMatch]:
        """Run caller-supplied rule text instead of a packaged relation template."""
        query_tokens = self._query_tokens(tokens, lemmatize)
        queries = self.compiler.compile_rules(query_tokens, rule_text, lemmatize)
        return self.scorer.rank(tokens, self.get_matches(queries))

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def convert_to_lemmas(self, tokens: list[str]) -> list[str]:
        """Lemmas of the tokens, one per token."""
        if self.lemmatizer is None:
            raise ConfigurationError("Lemmatization requested but no lemmatizer is configured")
        lemmas = self.lemmatizer.lemmatize(list(tokens))
        if len(lemmas) != len(tokens):
            raise ConfigurationError(
                f"Lemmatizer returned {len(lemmas)} lemmas for {len(tokens)} tokens"
            )
        return lemmas

    def _query_tokens(self, tokens: list[str], lemmatize: bool) -> list[str]:
        return self.convert_to_lemmas(tokens) if lemmatize else list(tokens)

    def _get_relation(
        self,
        tokens: list[str],
        relation: RelationKind,
        lemmatize: bool,
    ) -> list[ConsolidatedMatch]:
        query_tokens = self._query_tokens(tokens, lemmatize)
        queries = self.compiler.compile(query_tokens, relation, lemmatize)
        matches = self.get_matches(queries)
        logger.debug(
            f"[READER] {relation.value} of {' '.join(tokens)!r}: "
            f"{len(matches)} candidates from {len(queries)} queries"
        )
        return matches

    def get_matches(self, queries: list[CompiledQuery]) -> list[ConsolidatedMatch]:
        """Execute queries and consolidate all of their hits."""
        raw_matches = []
        for query in queries:
            for hit in self.corpus.execute(query):
                result = hit.result_tokens()
                if not result:
                    continue
                evidence = Evidence(document_id=hit.document_id, sentence=hit.sentence)
                raw_matches.append(RawMatch(result=result, evidence=evidence))
        return consolidate(raw_matches, self.evidence_cap)
