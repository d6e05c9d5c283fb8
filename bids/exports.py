# bids/exports.py
from io import BytesIO

from reportlab.lib.pagesizes import letter
from reportlab.lib.units import inch
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

SPEAKERS = {
    "proposal": "Client proposal",
    "bid": "My bid",
    "client": "Client",
    "me": "Me",
}

FONT = "Helvetica"
FONT_SIZE = 10
LINE_HEIGHT = 14


def conversation_pdf(project):
    """Renders a project's full message log (seeds included) to PDF bytes."""
    buffer = BytesIO()
    p = canvas.Canvas(buffer, pagesize=letter)
    width, height = letter
    max_width = width - 2 * inch

    # Header
    p.setFont("Helvetica-Bold", 16)
    p.drawString(1 * inch, height - 1 * inch, f"Conversation: {project.title[:60]}")
    p.setFont(FONT, 12)
    p.drawString(1 * inch, height - 1.3 * inch, f"Started {project.created_at.strftime('%Y-%m-%d')}")
    p.line(1 * inch, height - 1.4 * inch, width - 1 * inch, height - 1.4 * inch)

    y = height - 1.7 * inch
    p.setFont(FONT, FONT_SIZE)

    for message in project.messages.all():
        speaker = SPEAKERS.get(message.type, message.type)
        header = f"[{message.created_at.strftime('%Y-%m-%d %H:%M')}] {speaker}:"
        lines = [header]
        for paragraph in message.content.splitlines() or [""]:
            lines.extend(simpleSplit(paragraph, FONT, FONT_SIZE, max_width) or [""])

        for line in lines:
            if y < 1 * inch:  # New page if too low
                p.showPage()
                p.setFont(FONT, FONT_SIZE)
                y = height - 1 * inch
            p.drawString(1 * inch, y, line)
            y -= LINE_HEIGHT

        y -= 8  # small gap between messages

    p.showPage()
    p.save()
    return buffer.getvalue()
