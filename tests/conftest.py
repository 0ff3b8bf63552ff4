import pytest

from graph import CommunicationGraph
from settings import Settings


def make_graph(edges=(), vertices=()):
    g = CommunicationGraph()
    for v in vertices:
        g.add_vertex(v)
    for a, b in edges:
        g.add_edge(a, b)
    return g


def write_mail(path, sender=None, to=(), cc=(), body=""):
    lines = ["Message-ID: <1.JavaMail.evans@thyme>",
             "Date: Mon, 14 May 2001 16:39:00 -0700 (PDT)"]
    if sender:
        lines.append(f"From: {sender}")
    if to:
        lines.append("To: " + ", ".join(to))
    if cc:
        lines.append("Cc: " + ", ".join(cc))
    lines += ["Subject: test", "", body]
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines), encoding="latin-1")
    return path


@pytest.fixture
def mail_dir(tmp_path):
    root = tmp_path / "maildir"
    root.mkdir()
    return root


@pytest.fixture
def settings(mail_dir):
    return Settings(mail_dir=mail_dir, workers=2, drain_timeout=30, show_progress=False)
