TEXT_PREVIEW_LENGTH = 50


def cap_text_length(text: str, max_length: int = TEXT_PREVIEW_LENGTH) -> str:
	"""Cap text length for display, keeping exactly max_length characters before the ellipsis"""
	if len(text) <= max_length:
		return text
	return text[:max_length] + '...'


def child_css_path(parent_path: str, tag_name: str, position: int) -> str:
	"""Path locator for the child at 1-based position among its parent's element children"""
	return f'{parent_path} > {tag_name}:nth-child({position})'


def child_xpath(parent_xpath: str, tag_name: str, position: int) -> str:
	"""XPath step for the child at 1-based position among same-tag siblings"""
	return f'{parent_xpath}/{tag_name}[{position}]'


def class_names(class_attr: str | None) -> list[str]:
	return class_attr.split() if class_attr else []


def css_escape(identifier: str) -> str:
	"""Escape an id or class name for use in a CSS selector, following CSSOM CSS.escape()"""
	escaped: list[str] = []
	for position, char in enumerate(identifier):
		code = ord(char)
		if code == 0:
			escaped.append('\ufffd')
		elif (
			0x01 <= code <= 0x1F
			or code == 0x7F
			or (position == 0 and '0' <= char <= '9')
			or (position == 1 and '0' <= char <= '9' and identifier[0] == '-')
		):
			escaped.append(f'\\{code:x} ')
		elif position == 0 and char == '-' and len(identifier) == 1:
			escaped.append('\\-')
		elif code >= 0x80 or char in '-_' or ('0' <= char <= '9') or ('a' <= char.lower() <= 'z'):
			escaped.append(char)
		else:
			escaped.append('\\' + char)
	return ''.join(escaped)
