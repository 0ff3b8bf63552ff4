"""
============================================================
MAIL CORPUS INGESTION
============================================================
Walks a maildir-style hierarchy breadth-first and feeds
every message file to a thread pool. Each worker reads the
raw bytes, pulls out the sender and recipient addresses and
adds sender -> recipient edges to the shared graph.

File reads and regex matching run in parallel; graph writes
are serialised through the graph's lock.

When the pool does not drain in time, queued files are
cancelled and the ingestor is closed. A read that is already
in progress is abandoned only in the sense that its results
are discarded: the thread is not stopped, and the interpreter
still waits for it at exit.
============================================================
"""

import logging
import os
import re
from collections import deque
from concurrent.futures import ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Pattern, Tuple

from tqdm.auto import tqdm

from graph import CommunicationGraph
from settings import Settings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Address extraction
# ---------------------------------------------------------------------------

# Local part of an address, e.g.
# - phillip.allen
# - k_ward+energy
# - alpha-99
LOCAL_PART = r"[A-Za-z0-9._%+-]+"

HEADER_LABELS = ("From", "To", "Cc", "Bcc")


def build_address_pattern(domain: str) -> Pattern[str]:
    """
    Match either a header label directly followed by an address
    ("To: jeff.skilling@enron.com") or a bare address in the text.
    Only addresses ending in @<domain> are recognised.
    """
    address = rf"\b{LOCAL_PART}@{re.escape(domain)}\b"
    labels  = "|".join(HEADER_LABELS)
    return re.compile(
        rf"(?:(?P<label>{labels}):\s*(?P<labelled>{address}))|(?P<bare>{address})",
        re.I,
    )


def normalize_address(address: str) -> str:
    """Canonical form of an address, as stored in the graph."""
    return address.strip().lower()


def decode_message(raw: bytes) -> str:
    """latin-1 maps every byte to one character, so decoding cannot fail."""
    return raw.decode("latin-1")


def extract_addresses(text: str, pattern: Pattern[str]) -> Tuple[Optional[str], List[str]]:
    """
    Return (sender, recipients) for one message.

    The address after the first "From:" label is the sender. Every address
    matched after it, labelled or bare, is a recipient in order of
    appearance. Addresses seen before the sender are dropped.
    """
    sender = None
    recips = []

    for m in pattern.finditer(text):
        label = m.group("label")
        email = normalize_address(m.group("labelled") or m.group("bare"))

        if sender is None:
            if label is not None and label.lower() == "from":
                sender = email
            continue

        recips.append(email)

    return sender, recips


# ---------------------------------------------------------------------------
# Directory traversal
# ---------------------------------------------------------------------------

def discover_files(root: Path) -> Iterator[Path]:
    """
    Breadth-first walk yielding every regular file under `root`.
    A directory that cannot be listed is logged and skipped.
    """
    queue = deque([Path(root)])

    while queue:
        dir_path = queue.popleft()
        try:
            with os.scandir(dir_path) as it:
                entries = list(it)
        except OSError as e:
            logger.warning("Process '%s' failed: %s", dir_path, e)
            continue

        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    queue.append(Path(entry.path))
                elif entry.is_file():
                    yield Path(entry.path)
            except OSError as e:
                logger.warning("Stat '%s' failed: %s", entry.path, e)


# ---------------------------------------------------------------------------
# Ingestor
# ---------------------------------------------------------------------------

@dataclass
class IngestReport:
    processed: int = 0
    failed:    int = 0
    cancelled: int = 0
    timed_out: bool = False
    vertices:  int = 0
    edges:     int = 0


class Ingestor:
    """
    Populate a CommunicationGraph from a directory of message files.

    Usage:
        ingestor = Ingestor(graph, settings)
        report   = ingestor.run(settings.mail_dir)
    """

    def __init__(self, graph: CommunicationGraph, settings: Settings):
        self.graph    = graph
        self.settings = settings
        self.pattern  = build_address_pattern(settings.domain)

        # Guarded by graph.lock
        self.processed = 0
        self.failed    = 0
        self._closed   = False
        self.executor: Optional[ThreadPoolExecutor] = None

    # ------------------------------------------------------------------
    # Worker
    # ------------------------------------------------------------------

    def read_file(self, path: Path) -> bool:
        """Worker body. Returns False when the file could not be read."""
        with self.graph.lock:
            if self._closed:
                return False
            self.processed += 1

        try:
            raw = path.read_bytes()
        except OSError as e:
            logger.warning("Read '%s' failed: %s", path, e)
            with self.graph.lock:
                self.failed += 1
            return False

        sender, recips = extract_addresses(decode_message(raw), self.pattern)
        if sender is None:
            return True

        with self.graph.lock:
            # Abandoned after the drain timeout: results are discarded
            if self._closed:
                return False
            self.graph.add_edges(sender, recips)
        return True

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------

    def run(self, root: Path) -> IngestReport:
        print(f"📂 Reading mail files in {root} …")
        report = IngestReport()

        executor = self.executor = ThreadPoolExecutor(
            max_workers=self.settings.workers, thread_name_prefix="ingest"
        )
        futures = [executor.submit(self.read_file, p) for p in discover_files(root)]

        pbar = tqdm(
            total=len(futures), desc="  Files", disable=not self.settings.show_progress
        )
        try:
            for fut in as_completed(futures, timeout=self.settings.drain_timeout):
                fut.result()
                pbar.update(1)
        except FutureTimeout:
            report.timed_out = True
            with self.graph.lock:
                self._closed = True
            report.cancelled = sum(1 for f in futures if f.cancel())
            logger.warning(
                "Mail files not fully processed within %.0fs; "
                "abandoning %d queued file(s), results are partial",
                self.settings.drain_timeout, report.cancelled,
            )
        finally:
            pbar.close()
            executor.shutdown(wait=not report.timed_out, cancel_futures=True)

        with self.graph.lock:
            report.processed = self.processed
            report.failed    = self.failed
            report.vertices  = len(self.graph)
            report.edges     = self.graph.edge_count

        print(f"   Read {report.processed:,} mail files "
              f"({report.vertices:,} addresses, {report.edges:,} links)")
        return report


def ingest(root: Path, settings: Settings,
           graph: Optional[CommunicationGraph] = None) -> Tuple[CommunicationGraph, IngestReport]:
    """Build a graph from `root`. Convenience wrapper around Ingestor."""
    graph = graph if graph is not None else CommunicationGraph()
    report = Ingestor(graph, settings).run(root)
    return graph, report
