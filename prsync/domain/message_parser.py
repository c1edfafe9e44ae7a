from prsync.domain.models import GeneratedMessage


PARAGRAPH_SEPARATOR = "\n\n"


def parse_generated_message(text: str) -> GeneratedMessage:
    # First paragraph is the title; everything after the first blank line is the body.
    title, _, body = text.strip().partition(PARAGRAPH_SEPARATOR)
    title = title.strip()
    if not title:
        raise ValueError("Generated message has no title text.")
    return GeneratedMessage(title=title, body=body.strip())
