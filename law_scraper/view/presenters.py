"""
Text presentation of classified documents.

Labels are Traditional Chinese to match the source site.
"""

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from law_scraper.core.models import DeadlineCategory, EnrichedDocument
from law_scraper.core.normalizer import DEFAULT_TIMEZONE

BADGE_TEXT = {
    DeadlineCategory.DUE_SOON: "最新",
    DeadlineCategory.ACTIVE: "",
    DeadlineCategory.EXPIRED: "",
    DeadlineCategory.NO_DEADLINE: "",
}

# Checked in order; the first contained name is shown as the flag
PRIORITY_ISSUERS = ("內政部國土管理署", "內政部")

NOT_PROVIDED = "未提供"
NO_DATE = "尚未提供日期"
NO_SUBJECT = "未提供主旨"

EMPTY_DATASET_MESSAGE = "目前尚未取得法規紀錄，請稍候重試。"
NO_MATCH_MESSAGE = "沒有符合篩選條件的法規紀錄。"
LOAD_FAILED_MESSAGE = "資料載入失敗，請檢查網路或稍後再試。"


def priority_issuer_label(issuer: Optional[str]) -> Optional[str]:
    """Name of the priority issuer contained in issuer, if any."""
    if not issuer:
        return None
    for name in PRIORITY_ISSUERS:
        if name in issuer:
            return name
    return None


def format_deadline_note(doc: EnrichedDocument) -> str:
    """Short note on remaining days (deadline) or age (issue date)."""
    if doc.days_until_deadline is not None:
        if doc.days_until_deadline < 0:
            return f"逾期 {abs(doc.days_until_deadline)} 天"
        if doc.days_until_deadline == 0:
            return "今天截止"
        return f"剩餘 {doc.days_until_deadline} 天"

    if doc.days_since_issued is not None:
        if doc.days_since_issued == 0:
            return "今日發布"
        return f"發布 {doc.days_since_issued} 天"

    return NO_DATE


def format_updated_at(updated_at: Optional[datetime], tz: str = DEFAULT_TIMEZONE) -> str:
    """Dataset timestamp shown in the given timezone."""
    if updated_at is None:
        return "資料更新：尚未更新"
    if updated_at.tzinfo is None:
        return f"資料更新：{updated_at:%Y/%m/%d %H:%M}"
    local = updated_at.astimezone(ZoneInfo(tz))
    return f"資料更新：{local:%Y/%m/%d %H:%M}"


def status_message(filtered_count: int, document_count: int, total_records: Optional[int] = None) -> str:
    """
    Summary line above the results.

    total_records is the count reported by the source listing; it
    falls back to the number of loaded documents.
    """
    if document_count == 0:
        return EMPTY_DATASET_MESSAGE
    if filtered_count == 0:
        return NO_MATCH_MESSAGE
    total = total_records if total_records is not None else document_count
    return f"共 {filtered_count}/{total} 筆紀錄"


def _links_text(links, empty: str) -> str:
    if not links:
        return empty
    return ", ".join(f"{link.label} <{link.url}>" for link in links)


def render_card(doc: EnrichedDocument) -> str:
    """Full multi-line card for one document."""
    record = doc.record
    header = []
    badge = BADGE_TEXT.get(doc.deadline_category, "")
    if badge:
        header.append(f"[{badge}]")
    flag = priority_issuer_label(record.issuer)
    if flag:
        header.append(f"<{flag}>")
    if record.date:
        header.append(f"發文日期 {record.date}")

    title = (record.subject or "").strip() or NO_SUBJECT
    lines = [
        " ".join(header),
        title,
    ]
    if record.subject_url:
        lines.append(f"  {record.subject_url}")

    issued = f"{record.date} ({format_deadline_note(doc)})" if record.date else NO_DATE
    serial = record.article_number if record.article_number is not None else record.serial
    lines.extend(
        [
            f"  發文日期: {issued}",
            f"  發文單位: {record.issuer or NOT_PROVIDED}",
            f"  條文編號: {serial or NOT_PROVIDED}",
            f"  發文字號: {record.document_number or NOT_PROVIDED}",
            f"  分類: {record.category or NOT_PROVIDED}",
            f"  附件下載: {_links_text(record.attachments, '無附件')}",
            f"  相關連結: {_links_text(record.related_links, '無連結')}",
        ]
    )
    if record.content:
        lines.append(f"  {record.content}")

    return "\n".join(line for line in lines if line)


def render_simple_row(doc: EnrichedDocument) -> str:
    """Compact one-line rendering for the simple view."""
    record = doc.record
    flag = priority_issuer_label(record.issuer)
    age = f"{doc.days_since_issued} 天" if doc.days_since_issued is not None else "—"
    parts = [
        f"<{flag}>" if flag else "",
        record.date or NOT_PROVIDED,
        (record.subject or "").strip() or NO_SUBJECT,
        f"發布 {age}",
        record.issuer or NOT_PROVIDED,
    ]
    return " | ".join(part for part in parts if part)
