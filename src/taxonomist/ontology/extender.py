"""Ontology extension: enrich ontology leaves with ranked, header-relevant terms."""

import asyncio
import logging
import os
import tempfile
from pathlib import Path

from tqdm.asyncio import tqdm

from ..config import TaxonomistSettings
from ..errors import ConfigurationError, LeafProcessingError
from ..reader import TaxonomyReader
from .parser import parse_leaf, render_leaf
from .schemas import (
    CandidateRow,
    CollectedCandidates,
    ExtensionSummary,
    LeafReport,
    OntologyHeaderPath,
    OntologyLeafFile,
)

logger = logging.getLogger(__name__)

MANUAL_EVAL_COLUMNS = ["result", "query", "score", "similarity", "similarity_to_header"]


class OntologyExtender:
    """
    Enrich ontology leaf files with hyponyms and co-hyponyms of their terms.

    Per leaf file:
    1. Parse the header path(s) and the existing examples
    2. Build the query set (header terms, optionally plus examples)
    3. Collect ranked hyponyms and co-hyponyms of every query
    4. Keep candidates whose decay-weighted similarity to the header path
       exceeds the threshold
    5. Drop candidates already among the queries or examples, sort by rank score, cap
    6. Write the enriched leaf (or a diagnostic table in manual-eval mode)

    Leaf files are independent: a failing leaf is logged and reported, and
    the remaining leaves are still processed.
    """

    def __init__(
        self,
        reader: TaxonomyReader,
        similarity_to_header_threshold: float = 0.4,
        max_examples_per_leaf: int = 10,
        include_original_leaf: bool = True,
        only_query_by_leaf_header_terms: bool = False,
        manual_eval: bool = False,
        lemmatize: bool = False,
        max_concurrency: int = 4,
    ):
        """
        Initialize the extender.

        Args:
            reader: Taxonomy reader used for hyponym/co-hyponym queries
            similarity_to_header_threshold: Minimum relevance to the header path
            max_examples_per_leaf: Maximum examples added per leaf
            include_original_leaf: Copy the original header and examples to the output
            only_query_by_leaf_header_terms: Do not query with existing examples
            manual_eval: Write scored diagnostic tables instead of examples
            lemmatize: Match query tokens by lemma
            max_concurrency: Leaf files processed at once by extend_directory()
        """
        if max_examples_per_leaf < 0:
            raise ConfigurationError("max_examples_per_leaf must be non-negative")
        if max_concurrency < 1:
            raise ConfigurationError("max_concurrency must be at least 1")

        self.reader = reader
        self.similarity_to_header_threshold = similarity_to_header_threshold
        self.max_examples_per_leaf = max_examples_per_leaf
        self.include_original_leaf = include_original_leaf
        self.only_query_by_leaf_header_terms = only_query_by_leaf_header_terms
        self.manual_eval = manual_eval
        self.lemmatize = lemmatize
        self.max_concurrency = max_concurrency

    @classmethod
    def from_settings(
        cls,
        reader: TaxonomyReader,
        settings: TaxonomistSettings,
    ) -> "OntologyExtender":
        return cls(
            reader=reader,
            similarity_to_header_threshold=settings.similarity_to_header_threshold,
            max_examples_per_leaf=settings.max_examples_per_leaf,
            include_original_leaf=settings.include_original_leaf,
            only_query_by_leaf_header_terms=settings.only_query_by_leaf_header_terms,
            manual_eval=settings.manual_eval,
            lemmatize=settings.lemmatize,
            max_concurrency=settings.max_concurrency,
        )

    # -------------------------------------------------------------------------
    # Relevance
    # -------------------------------------------------------------------------

    def relevance(self, result: list[str], path: OntologyHeaderPath) -> float:
        """
        Decay-weighted similarity of a candidate to a header path.

        Sum over the path segments of the raw dot-product similarity between
        the lowercased candidate and the segment's words, weighted 1.0 at the
        leaf and halved at every step towards the root.
        """
        lowered = [t.lower() for t in result]
        return sum(
            self.reader.scorer.raw_similarity(lowered, segment) * weight
            for segment, weight in zip(path.segments, path.weights())
        )

    def is_relevant(self, result: list[str], path: OntologyHeaderPath) -> bool:
        return self.relevance(result, path) > self.similarity_to_header_threshold

    # -------------------------------------------------------------------------
    # Candidates
    # -------------------------------------------------------------------------

    def build_queries(self, leaf: OntologyLeafFile) -> list[str]:
        """Distinct, lowercased, non-empty query terms for a leaf."""
        terms = list(leaf.header_terms)
        if not self.only_query_by_leaf_header_terms:
            terms.extend(leaf.examples)

        queries: list[str] = []
        for term in terms:
            query = " ".join(term.lower().split())
            if query and query not in queries:
                queries.append(query)
        return queries

    def collect(self, leaf: OntologyLeafFile, queries: list[str]) -> CollectedCandidates:
        """Hyponyms and co-hyponyms of every query that pass the relevance filter."""
        collected = CollectedCandidates()
        relevance_cache: dict[tuple[str, ...], float] = {}

        for query in queries:
            tokens = query.split()
            matches = self.reader.get_ranked_hyponyms(tokens, self.lemmatize)
            matches += self.reader.get_ranked_cohyponyms(tokens, self.lemmatize)

            for match in matches:
                key = tuple(match.result)
                if key not in relevance_cache:
                    relevance_cache[key] = self.relevance(match.result, leaf.path)
                relevance = relevance_cache[key]
                if relevance <= self.similarity_to_header_threshold:
                    continue

                row = CandidateRow(match=match, relevance=relevance)
                collected.all_queries.append(row)
                if len(match.query) < 2:
                    collected.single_word.append(row)
                else:
                    collected.multi_word.append(row)

        logger.debug(
            f"[EXTEND] {leaf.name}: {len(collected.all_queries)} relevant candidates "
            f"from {len(queries)} queries"
        )
        return collected

    def select(
        self,
        rows: list[CandidateRow],
        queries: list[str],
        distinct_per_query: bool = False,
    ) -> list[CandidateRow]:
        """
        Drop candidates already among the known terms, sort by rank score and cap.

        Candidates are de-duplicated by surface form (or by surface form and
        query when ``distinct_per_query``), keeping the best-scored one.
        """
        known = set(queries)
        fresh = [r for r in rows if r.surface.lower() not in known]
        fresh.sort(key=lambda r: r.match.score, reverse=True)

        selected: list[CandidateRow] = []
        seen: set = set()
        for row in fresh:
            key = (row.surface, tuple(row.match.query)) if distinct_per_query else row.surface
            if key in seen:
                continue
            seen.add(key)
            selected.append(row)
        return selected[: self.max_examples_per_leaf]

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def extend_text(self, leaf: OntologyLeafFile) -> tuple[str, int]:
        """
        Enriched text for a parsed leaf.

        Returns:
            (output text, number of candidate rows written)
        """
        queries = self.build_queries(leaf)
        collected = self.collect(leaf, queries)

        if not self.manual_eval:
            # existing examples are never added again, even when not queried
            known = queries + [" ".join(e.lower().split()) for e in leaf.examples]
            selected = self.select(collected.all_queries, known)
            additions = [row.surface for row in selected]
            return render_leaf(leaf, additions, self.include_original_leaf), len(additions)

        sections = [
            ("ALL QUERIES:", collected.all_queries),
            ("SINGLE-WORD QUERIES:", collected.single_word),
            ("MULTI-WORD QUERIES:", collected.multi_word),
        ]
        lines = ["", "\t".join(MANUAL_EVAL_COLUMNS)]
        written = 0
        for title, rows in sections:
            lines.append(title)
            for row in self.select(rows, queries, distinct_per_query=True):
                lines.append(format_row(row))
                written += 1

        original = render_leaf(leaf, [], include_original=True) if self.include_original_leaf else ""
        return original + "".join(f"{line}\n" for line in lines), written

    def extend_file(self, path: str | Path, output_dir: str | Path) -> LeafReport:
        """
        Enrich one leaf file into ``output_dir`` under the same file name.

        The output file only appears once it is completely written.

        Raises:
            LeafProcessingError: If anything goes wrong for this leaf
        """
        path = Path(path)
        output_dir = Path(output_dir)
        try:
            leaf = parse_leaf(path.name, path.read_text(encoding="utf-8"))
            text, added = self.extend_text(leaf)
            write_atomic(output_dir / path.name, text)
        except Exception as e:
            raise LeafProcessingError(f"{path.name}: {e}", path.name) from e

        logger.info(f"[EXTEND] extended ontology leaf {path.name} (+{added})")
        return LeafReport(name=path.name, status="extended", added=added)

    async def extend_directory(
        self,
        ontology_dir: str | Path,
        output_dir: str | Path,
        pattern: str = "*",
        show_progress: bool = True,
    ) -> ExtensionSummary:
        """
        Enrich every leaf file in a directory.

        Leaves are processed in worker threads, at most ``max_concurrency`` at
        a time. Failures are logged and reported, never raised.

        Args:
            ontology_dir: Directory with leaf files
            output_dir: Directory for enriched files (created if missing)
            pattern: Glob pattern selecting leaf files
            show_progress: Show a progress bar

        Returns:
            One LeafReport per leaf file, in file name order
        """
        ontology_dir = Path(ontology_dir)
        output_dir = Path(output_dir)
        if not ontology_dir.is_dir():
            raise ConfigurationError(f"Ontology directory not found: {ontology_dir}")
        if output_dir.resolve() == ontology_dir.resolve():
            raise ConfigurationError("output_dir must differ from ontology_dir")
        output_dir.mkdir(parents=True, exist_ok=True)

        files = sorted(p for p in ontology_dir.glob(pattern) if p.is_file())
        logger.info(
            f"[EXTEND] Extending {len(files)} leaves from {ontology_dir} "
            f"(concurrency={self.max_concurrency})"
        )

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def process(path: Path) -> LeafReport:
            async with semaphore:
                try:
                    return await asyncio.to_thread(self.extend_file, path, output_dir)
                except LeafProcessingError as e:
                    logger.error(f"[EXTEND] failed to extend ontology leaf {e.leaf_name}: {e.__cause__}")
                    return LeafReport(name=e.leaf_name, status="failed", error=str(e))

        tasks = [process(path) for path in files]
        if show_progress:
            reports = await tqdm.gather(*tasks, desc="Extending leaves", unit="leaf")
        else:
            reports = await asyncio.gather(*tasks)

        summary = ExtensionSummary(reports=list(reports))
        logger.info(
            f"[EXTEND] COMPLETE: {len(summary.succeeded)} extended, {len(summary.failed)} failed"
        )
        return summary


def format_row(row: CandidateRow) -> str:
    """Tab-separated diagnostic row."""
    match = row.match
    return "\t".join(
        [
            match.surface,
            " ".join(match.query),
            str(match.score),
            str(match.similarity),
            str(row.relevance),
        ]
    )


def write_atomic(path: Path, text: str) -> None:
    """Write text to a temporary file next to ``path``, then move it into place."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise
