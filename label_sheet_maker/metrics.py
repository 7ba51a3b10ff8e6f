"""
Text measurement shared by layout validation and PDF rendering.
"""

# PIP3 modules
import reportlab.pdfbase.cidfonts
import reportlab.pdfbase.pdfmetrics

# local repo modules
import label_sheet_maker as lsm
import label_sheet_maker.config
import label_sheet_maker.errors


RenderingFailure = lsm.errors.RenderingFailure
points_to_mm = lsm.config.points_to_mm

CJK_FONT = "STSong-Light"

FONT_ALIASES = {
	"arial": "Helvetica",
	"calibri": "Helvetica",
	"helvetica": "Helvetica",
	"times new roman": "Times-Roman",
	"times": "Times-Roman",
	"courier new": "Courier",
	"courier": "Courier",
	"simsun": CJK_FONT,
	"microsoft yahei": CJK_FONT,
	"stsong-light": CJK_FONT,
}

CID_FONTS = {CJK_FONT}

# standard Type 1 fonts draw through WinAnsiEncoding, except the two symbol faces
SINGLE_BYTE_CODEC = "cp1252"
SYMBOL_FONTS = {"Symbol", "ZapfDingbats"}


#============================================
def _font_key(name: str) -> str:
	return " ".join(name.strip().lower().split())


#============================================
def _ensure_registered(font_name: str) -> None:
	"""
	Register a CID font with ReportLab the first time it is used.

	Args:
		font_name: ReportLab font name.
	"""
	if font_name not in CID_FONTS:
		return
	if font_name in reportlab.pdfbase.pdfmetrics.getRegisteredFontNames():
		return
	reportlab.pdfbase.pdfmetrics.registerFont(reportlab.pdfbase.cidfonts.UnicodeCIDFont(font_name))


#============================================
def resolve_font_name(font: str) -> str:
	"""
	Map a font identifier to a ReportLab font name.

	Args:
		font: Font identifier such as "Arial" or "SimSun".

	Returns:
		Registered ReportLab font name.
	"""
	font_name = FONT_ALIASES.get(_font_key(font or ""))
	if font_name is None:
		known = set(reportlab.pdfbase.pdfmetrics.standardFonts)
		known.update(reportlab.pdfbase.pdfmetrics.getRegisteredFontNames())
		if font not in known:
			raise RenderingFailure(f"Unsupported font: {font!r}")
		font_name = font
	try:
		_ensure_registered(font_name)
	except Exception as error:
		raise RenderingFailure(f"Cannot load font {font!r}: {error}") from error
	return font_name


#============================================
def check_encodable(font: str, text: str) -> None:
	"""
	Reject text that a single-byte standard font cannot draw.

	Args:
		font: Font identifier.
		text: Single line of text.

	Raises:
		RenderingFailure: Naming the font and the first character it lacks.
	"""
	font_name = resolve_font_name(font)
	if font_name not in reportlab.pdfbase.pdfmetrics.standardFonts or font_name in SYMBOL_FONTS:
		return
	try:
		text.encode(SINGLE_BYTE_CODEC)
	except UnicodeEncodeError as error:
		bad_char = error.object[error.start]
		raise RenderingFailure(
			f"Font {font!r} cannot draw character {bad_char!r} "
			f"(U+{ord(bad_char):04X}) in {text!r}"
		) from error


#============================================
def measure_width(font: str, font_size: float, text: str) -> float:
	"""
	Measure the rendered width of one line of text.

	Args:
		font: Font identifier.
		font_size: Font size in points.
		text: Single line of text.

	Returns:
		Width in millimetres, 0.0 for an empty string.
	"""
	font_name = resolve_font_name(font)
	if not text:
		return 0.0
	check_encodable(font, text)
	try:
		width = reportlab.pdfbase.pdfmetrics.stringWidth(text, font_name, font_size)
	except Exception as error:
		raise RenderingFailure(f"Cannot measure text in font {font!r}: {error}") from error
	return points_to_mm(width)


#============================================
def measure_ascent(font: str, font_size: float) -> float:
	"""
	Measure the font ascent above the baseline.

	Args:
		font: Font identifier.
		font_size: Font size in points.

	Returns:
		Ascent in millimetres.
	"""
	font_name = resolve_font_name(font)
	try:
		ascent = reportlab.pdfbase.pdfmetrics.getAscent(font_name) * font_size / 1000.0
	except Exception as error:
		raise RenderingFailure(f"Cannot read ascent of font {font!r}: {error}") from error
	return points_to_mm(ascent)
