"""
Read-only lookups over the graph and its team analysis, plus the
user-facing outputs: connector listing, interactive prompt and the
per-address summary CSV.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, TextIO

import pandas as pd
from pydantic import BaseModel, Field

from graph import CommunicationGraph
from ingest import normalize_address
from process import TeamAnalysis

logger = logging.getLogger(__name__)

PROMPT = "Email address of the individual (or EXIT to quit): "


class AddressProfile(BaseModel):
    address:      str
    sent:         int  = Field(description="Distinct individuals this address wrote to.")
    received:     int  = Field(description="Distinct individuals this address heard from.")
    team_id:      int  = Field(description="Index of the team (connected component).")
    team_size:    int  = Field(description="Number of individuals in the same team.")
    is_connector: bool = Field(description="Removing this address splits its team.")


class QueryService:
    """
    Usage:
        service = QueryService(graph, analysis)
        service.team_size("kenneth.lay@enron.com")
    """

    def __init__(self, graph: CommunicationGraph, analysis: TeamAnalysis):
        self.graph    = graph
        self.analysis = analysis

    def has_address(self, address: str) -> bool:
        return address in self.graph

    def sent_count(self, address: str) -> int:
        return self.graph.sent_count(address)

    def received_count(self, address: str) -> int:
        return self.graph.received_count(address)

    def team_size(self, address: str) -> int:
        return self.analysis.team_size(address)

    def is_connector(self, address: str) -> bool:
        return address in self.analysis.connectors

    @property
    def connectors(self):
        return self.analysis.connectors

    def profile(self, address: str) -> Optional[AddressProfile]:
        if not self.has_address(address):
            return None
        return AddressProfile(
            address      = address,
            sent         = self.sent_count(address),
            received     = self.received_count(address),
            team_id      = self.analysis.team_id(address),
            team_size    = self.team_size(address),
            is_connector = self.is_connector(address),
        )

    def profiles(self) -> Iterable[AddressProfile]:
        for address in self.graph.vertices():
            yield self.profile(address)


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------

def write_connectors(connectors: Iterable[str], stream: TextIO,
                     path: Optional[Path] = None):
    """List connectors on `stream`; also write them to `path` when given."""
    connectors = list(connectors)

    print("\nConnectors:", file=stream)
    for c in connectors:
        print(c, file=stream)
    print(file=stream)

    if path is None:
        return

    try:
        with open(path, "w") as f:
            for c in connectors:
                f.write(c + "\n")
    except OSError as e:
        logger.error("Writing connectors to '%s' failed: %s", path, e)


def export_summary(service: QueryService, path: Path) -> Optional[pd.DataFrame]:
    """Per-address degrees, team and connector flag, largest teams first."""
    columns = ["address", "sent", "received", "team_id", "team_size", "is_connector"]
    df = pd.DataFrame(
        [p.model_dump() for p in service.profiles()], columns=columns
    )
    df = df.sort_values(["team_size", "address"], ascending=[False, True])

    try:
        df.to_csv(path, index=False)
    except OSError as e:
        logger.error("Writing summary to '%s' failed: %s", path, e)
        return None
    return df


def run_prompt(service: QueryService, stdin: TextIO, stdout: TextIO):
    """Answer address lookups until EXIT or end of input."""
    while True:
        stdout.write(PROMPT)
        stdout.flush()

        line = stdin.readline()
        if not line:
            break

        address = normalize_address(line)
        if address.upper() == "EXIT":
            break

        if not service.has_address(address):
            print(f"Email address ({address}) not found in the dataset.", file=stdout)
            continue

        print(f"* {address} has sent messages to {service.sent_count(address)} others",
              file=stdout)
        print(f"* {address} has received messages from {service.received_count(address)} others",
              file=stdout)
        print(f"* {address} is in a team with {service.team_size(address)} individuals",
              file=stdout)
