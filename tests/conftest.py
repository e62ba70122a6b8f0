"""Shared fixtures: sample KAA pages and a source config."""

from datetime import date

import pytest

from law_scraper.core.models import LawRecord, Link
from law_scraper.navigators.base import SourceConfig

BASE_URL = "https://www.kaa.org.tw"
LISTING_URL = f"{BASE_URL}/law_list.php"


def _listing_html(rows, page=1, total_pages=1, total_records=None):
    """
    Build a listing page.

    rows: (year, serial, subject, category, href) tuples; href may be None.
    """
    total_records = total_records if total_records is not None else len(rows)
    body_rows = []
    for year, serial, subject, category, href in rows:
        if href:
            title = f'<a href="{href}"><div title="{subject}">{subject[:5]}...</div></a>'
        else:
            title = subject
        body_rows.append(
            f"<tr><td>{year}</td><td>{serial}</td><td>{title}</td><td>{category}</td></tr>"
        )

    return f"""
    <html><body>
      <div class="mtable">
        <table>
          <tr><th>年度</th><th>編號</th><th>主旨</th><th>分類</th></tr>
          {''.join(body_rows)}
        </table>
      </div>
      <div class="quantity">
        <div class="q_box2">資料筆數：{total_records} 頁數：{page}/{total_pages}</div>
      </div>
    </body></html>
    """


def _detail_html(fields, attachments=(), related=()):
    """
    Build a detail page.

    fields: label -> text; attachments / related: (label, href) tuples.
    """
    rows = [f"<tr><th>{label}：</th><td>{value}</td></tr>" for label, value in fields.items()]
    if attachments:
        links = "".join(f'<a href="{href}">{label}</a>' for label, href in attachments)
        rows.append(f"<tr><th>相關檔案</th><td>{links}</td></tr>")
    if related:
        links = "".join(f'<a href="{href}">{label}</a>' for label, href in related)
        rows.append(f"<tr><th>相關網址</th><td>{links}</td></tr>")

    return f"""
    <html><body>
      <div class="addtable"><table>{''.join(rows)}</table></div>
    </body></html>
    """


@pytest.fixture
def listing_html():
    """Factory for listing page HTML."""
    return _listing_html


@pytest.fixture
def detail_html():
    """Factory for detail page HTML."""
    return _detail_html


@pytest.fixture
def source():
    """Source config with no inter-request delay."""
    return SourceConfig(
        source_id="kaa_law",
        source_name="KAA",
        base_url=BASE_URL,
        listing_url=LISTING_URL,
        referer=f"{BASE_URL}/",
        detail_concurrency=2,
        detail_delay=0.0,
    )


@pytest.fixture
def reference_day():
    return date(2024, 6, 10)


@pytest.fixture
def make_record():
    """Factory for LawRecord with sensible defaults."""
    def _make(**overrides):
        data = {
            "year": "113",
            "serial": "1",
            "category": "建築管理",
            "subject": "建築技術規則修正",
            "subject_url": f"{BASE_URL}/law_detail.php?id=1",
            "issuer": "內政部國土管理署",
            "date": "2024-06-01",
            "document_number": "內授國建管字第1130001號",
            "article_number": None,
            "attachments": (Link("修正條文", f"{BASE_URL}/files/a.pdf"),),
        }
        data.update(overrides)
        return LawRecord(**data)
    return _make
