import pytest
import reportlab.pdfbase.pdfmetrics

import label_sheet_maker.config
import label_sheet_maker.errors
import label_sheet_maker.metrics as metrics


#============================================
def test_font_aliases() -> None:
	"""
	Office font names map onto ReportLab fonts.
	"""
	assert metrics.resolve_font_name("Arial") == "Helvetica"
	assert metrics.resolve_font_name("  times   NEW roman ") == "Times-Roman"
	assert metrics.resolve_font_name("Courier New") == "Courier"
	assert metrics.resolve_font_name("Helvetica-Bold") == "Helvetica-Bold"


#============================================
def test_cjk_font_is_registered() -> None:
	"""
	CJK font names register the built-in CID font.
	"""
	assert metrics.resolve_font_name("SimSun") == metrics.CJK_FONT
	assert metrics.CJK_FONT in reportlab.pdfbase.pdfmetrics.getRegisteredFontNames()
	assert metrics.measure_width("Microsoft YaHei", 12.0, "标签") > 0.0


#============================================
def test_unknown_font_is_a_rendering_failure() -> None:
	"""
	Unknown font names raise RenderingFailure.
	"""
	with pytest.raises(label_sheet_maker.errors.RenderingFailure):
		metrics.measure_width("No Such Font", 12.0, "ABC")


#============================================
def test_measure_width_matches_reportlab() -> None:
	"""
	Widths are ReportLab string widths in millimetres.
	"""
	points = reportlab.pdfbase.pdfmetrics.stringWidth("ABC", "Helvetica", 12.0)
	expected = points / label_sheet_maker.config.POINTS_PER_MM
	assert metrics.measure_width("Arial", 12.0, "ABC") == pytest.approx(expected)
	assert metrics.measure_width("Arial", 12.0, "ABC") == metrics.measure_width("Arial", 12.0, "ABC")


#============================================
def test_measure_width_empty_and_scaling() -> None:
	"""
	Empty text is zero wide and width scales with font size.
	"""
	assert metrics.measure_width("Arial", 12.0, "") == 0.0
	small = metrics.measure_width("Arial", 10.0, "Label")
	large = metrics.measure_width("Arial", 20.0, "Label")
	assert small > 0.0
	assert large == pytest.approx(2.0 * small)


#============================================
def test_measure_ascent() -> None:
	"""
	Ascent is positive and smaller than the font size.
	"""
	ascent = metrics.measure_ascent("Arial", 12.0)
	assert 0.0 < ascent < label_sheet_maker.config.points_to_mm(12.0)


#============================================
def test_check_encodable() -> None:
	"""
	Single-byte standard fonts accept Windows-1252 text only, CID fonts accept CJK.
	"""
	metrics.check_encodable("Arial", "Café 12€")
	metrics.check_encodable("SimSun", "标签")
	with pytest.raises(label_sheet_maker.errors.RenderingFailure) as excinfo:
		metrics.measure_width("Times New Roman", 12.0, "Box 标")
	assert "U+6807" in str(excinfo.value)
