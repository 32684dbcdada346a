"""Render a FamilySnapshot as a standalone HTML page.

Calendars are columns, weekdays are rows and each cell lists that day's
events. Styling comes entirely from the linked stylesheet.
"""

from __future__ import annotations

from html import escape

from family_dashboard.calendar.models import DAY_LABELS, FamilySnapshot

PAGE_TITLE = "Family Calendar"


def _cell(events: tuple) -> str:
    if not events:
        return '<td class="day-events empty"></td>'
    items = "".join(
        f'<li class="event" data-event-id="{escape(ev.id)}">{escape(ev.title)}</li>'
        for ev in events
    )
    return f'<td class="day-events"><ul>{items}</ul></td>'


def render_snapshot_html(snapshot: FamilySnapshot, stylesheet_url: str = "") -> str:
    """Return the full HTML document for ``snapshot``."""
    head = [
        '<meta charset="utf-8">',
        f"<title>{PAGE_TITLE}</title>",
    ]
    if stylesheet_url:
        head.append(f'<link rel="stylesheet" href="{escape(stylesheet_url)}">')

    header_cells = "".join(
        f'<th class="calendar-name">{escape(cal.calendar_name)}</th>' for cal in snapshot.calendars
    )
    rows = []
    for index, label in enumerate(DAY_LABELS):
        cells = "".join(_cell(cal.days[index].events) for cal in snapshot.calendars)
        rows.append(f'<tr class="day-row"><th class="day-name">{label}</th>{cells}</tr>')

    return (
        "<!DOCTYPE html>\n"
        f'<html lang="en"><head>{"".join(head)}</head><body>'
        '<table class="family-calendar">'
        f'<thead><tr><th class="corner"></th>{header_cells}</tr></thead>'
        f'<tbody>{"".join(rows)}</tbody>'
        "</table></body></html>\n"
    )
