from telegram import InlineKeyboardButton


def parse_text(content: str) -> dict[str, str]:
    """
    'front | back' or 'front\\nback...' -> {'front': str, 'back': str}
    Anything else becomes a front with an empty back.
    """
    text = content.strip()

    if '|' in text:
        front, back = text.split('|', 1)
        return {'front': front.strip(), 'back': back.strip()}

    lines = [line.strip() for line in text.split('\n') if line.strip()]
    if len(lines) >= 2:
        return {'front': lines[0], 'back': '\n'.join(lines[1:])}

    return {'front': text, 'back': ''}


def truncate(text: str, max_len: int) -> str:
    return text if len(text) <= max_len else text[:max_len - 1] + '…'


def parse_cap_args(args: list[str]) -> tuple[int, str]:
    """['15', 'French', 'verbs'] -> (15, 'French verbs'). Raises ValueError."""
    if len(args) < 2:
        raise ValueError("usage: /cap <number> <deck name>")
    cap = int(args[0])
    if cap < 0:
        raise ValueError("cap can't be negative")
    return cap, ' '.join(args[1:])


def get_buttons(items: list[dict[str, str | int]], prefix: str) -> list[list[InlineKeyboardButton]]:
    return [
        [InlineKeyboardButton(item['name'], callback_data=f"{prefix}_{item['id']}")]
        for item in items
    ]
