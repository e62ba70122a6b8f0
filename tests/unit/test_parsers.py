"""Tests for listing and detail page parsers."""

import pytest
from bs4 import BeautifulSoup

from law_scraper.core.exceptions import ParseError
from law_scraper.core.models import Link
from law_scraper.parsers.law_detail import LawDetailParser, extract_links
from law_scraper.parsers.listing import parse_listing, parse_pagination

LISTING_URL = "https://www.kaa.org.tw/law_list.php"
DETAIL_URL = "https://www.kaa.org.tw/law_detail.php?id=9"


class TestParseListing:
    """Tests for parse_listing function."""

    def test_rows_extracted(self, listing_html):
        html = listing_html([
            ("113", "120", "建築技術規則建築設計施工編修正", "建築管理", "law_detail.php?id=120"),
            ("113", "119", "都市更新條例施行細則", "都市更新", "law_detail.php?id=119"),
        ], page=1, total_pages=6, total_records=120)

        page = parse_listing(html, LISTING_URL)

        assert len(page.records) == 2
        first = page.records[0]
        assert first.year == "113"
        assert first.serial == "120"
        assert first.category == "建築管理"
        assert first.subject == "建築技術規則建築設計施工編修正"
        assert first.subject_url == "https://www.kaa.org.tw/law_detail.php?id=120"

    def test_pagination(self, listing_html):
        html = listing_html([], page=2, total_pages=6, total_records=120)
        page = parse_listing(html, LISTING_URL)

        assert page.records == []
        assert page.pagination.total_records == 120
        assert page.pagination.current_page == 2
        assert page.pagination.total_pages == 6

    def test_row_without_link(self, listing_html):
        html = listing_html([("112", "7", "無連結公告", "其他", None)])
        record = parse_listing(html, LISTING_URL).records[0]

        assert record.subject == "無連結公告"
        assert record.subject_url is None

    def test_anchor_text_when_no_title(self):
        html = """
        <div class="mtable"><table>
          <tr><th>h</th></tr>
          <tr><td>113</td><td>3</td><td><a href="/law_detail.php?id=3"> 錨點 文字 </a></td><td>分類</td></tr>
        </table></div>
        """
        record = parse_listing(html, LISTING_URL).records[0]

        assert record.subject == "錨點 文字"
        assert record.subject_url == "https://www.kaa.org.tw/law_detail.php?id=3"

    def test_short_rows_skipped(self):
        html = """
        <div class="mtable"><table>
          <tr><th>h</th></tr>
          <tr><td colspan="4">查無資料</td></tr>
          <tr><td>113</td><td>1</td><td>主旨</td><td>分類</td></tr>
        </table></div>
        """
        records = parse_listing(html, LISTING_URL).records

        assert [r.serial for r in records] == ["1"]

    def test_missing_table(self):
        with pytest.raises(ParseError):
            parse_listing("<html><body><p>維護中</p></body></html>", LISTING_URL)


class TestParsePagination:
    """Tests for parse_pagination function."""

    def test_missing_box_defaults_to_single_page(self):
        soup = BeautifulSoup("<div></div>", "lxml")
        pagination = parse_pagination(soup)

        assert pagination.total_records is None
        assert pagination.current_page == 1
        assert pagination.total_pages == 1


class TestLawDetailParser:
    """Tests for LawDetailParser."""

    @pytest.fixture
    def parser(self):
        return LawDetailParser()

    def test_fields(self, parser, detail_html):
        html = detail_html(
            {
                "法規年度": "113年度",
                "發文單位": "內政部國土管理署",
                "發文日期": "113年5月27日",
                "發文字號": "內授國建管字第1130805555號",
                "條文編號": "第10條",
                "條文主旨": "修正建築技術規則部分條文",
                "條文內容": "有關 建築物 之 規定",
                "截止日期": "113/06/30",
            },
            attachments=[("修正對照表", "/files/113-10.pdf"), ("", "/files/113-10.odt")],
            related=[("全國法規資料庫", "https://law.moj.gov.tw/")],
        )

        record = parser.parse(html, DETAIL_URL)

        assert record.law_year == 113
        assert record.law_year_label == "113年度"
        assert record.issuer == "內政部國土管理署"
        assert record.date == "2024-05-27"
        assert record.document_number == "內授國建管字第1130805555號"
        assert record.article_number == "第10條"
        assert record.subject == "修正建築技術規則部分條文"
        assert record.content == "有關 建築物 之 規定"
        assert record.deadline == "2024-06-30"
        assert record.attachments == [
            Link("修正對照表", "https://www.kaa.org.tw/files/113-10.pdf"),
            Link("附件", "https://www.kaa.org.tw/files/113-10.odt"),
        ]
        assert record.related_links == [Link("全國法規資料庫", "https://law.moj.gov.tw/")]

    def test_unresolvable_date_kept_raw(self, parser, detail_html):
        record = parser.parse(detail_html({"發文日期": "另行通知"}), DETAIL_URL)
        assert record.date == "另行通知"

    def test_oversized_date_digits_kept_raw(self, parser, detail_html):
        """Test a number-like date keeps the rest of the record intact."""
        html = detail_html(
            {
                "發文單位": "高雄市政府工務局",
                "發文日期": "字第11300012345號",
                "截止日期": "11231234567/1/1",
            },
            attachments=[("附件一", "/files/a.pdf")],
        )

        record = parser.parse(html, DETAIL_URL)

        assert record.date == "字第11300012345號"
        assert record.deadline == "11231234567/1/1"
        assert record.issuer == "高雄市政府工務局"
        assert record.attachments == [Link("附件一", "https://www.kaa.org.tw/files/a.pdf")]

    def test_empty_date_is_none(self, parser, detail_html):
        record = parser.parse(detail_html({"發文日期": ""}), DETAIL_URL)
        assert record.date is None

    def test_unknown_labels_ignored(self, parser, detail_html):
        record = parser.parse(detail_html({"承辦人": "王小明", "發文單位": "新北市政府"}), DETAIL_URL)

        assert record.issuer == "新北市政府"
        assert record.subject is None

    def test_missing_rows_leave_defaults(self, parser, detail_html):
        record = parser.parse(detail_html({"發文單位": "高雄市政府"}), DETAIL_URL)

        assert record.date is None
        assert record.attachments == []
        assert record.related_links == []

    def test_no_rows_raises(self, parser):
        with pytest.raises(ParseError):
            parser.parse("<html><body>404</body></html>", DETAIL_URL)


class TestExtractLinks:
    """Tests for extract_links function."""

    def test_skips_bad_hrefs(self):
        cell = BeautifulSoup(
            '<table><tr><td><a href="javascript:void(0)">x</a><a>no href</a>'
            '<a href="doc.pdf">文件</a></td></tr></table>',
            "lxml",
        ).td

        links = extract_links(cell, DETAIL_URL)

        assert links == [Link("文件", "https://www.kaa.org.tw/doc.pdf")]

    def test_label_falls_back_to_url(self):
        cell = BeautifulSoup('<table><tr><td><a href="https://a.test/x"></a></td></tr></table>', "lxml").td
        assert extract_links(cell, DETAIL_URL) == [Link("https://a.test/x", "https://a.test/x")]
