import asyncio
import io
import zipfile

import defusedxml.ElementTree as ElementTree
import docx.document
import pytest

import label_sheet_maker.config as config
import label_sheet_maker.errors
import label_sheet_maker.layout as layout_lib
import label_sheet_maker.word_render as word_render

import spec_builders


W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"


#============================================
def w(tag: str) -> str:
	return f"{{{W_NS}}}{tag}"


#============================================
def _document_xml(data: bytes):
	"""
	Parse word/document.xml out of .docx bytes.

	Args:
		data: .docx bytes.

	Returns:
		Root element of the main document part.
	"""
	with zipfile.ZipFile(io.BytesIO(data)) as archive:
		xml_bytes = archive.read("word/document.xml")
	return ElementTree.fromstring(xml_bytes)


#============================================
def _render(spec) -> tuple:
	layout = layout_lib.compute_layout(spec)
	data = asyncio.run(word_render.render_word(spec, layout))
	return layout, _document_xml(data)


#============================================
def test_one_table_and_section_per_page() -> None:
	"""
	Each layout page becomes one section holding one table.
	"""
	spec = spec_builders.build_spec(count=30)
	layout, root = _render(spec)
	body = root.find(w("body"))
	tables = body.findall(w("tbl"))
	assert layout.total_pages == 2
	assert len(tables) == layout.total_pages
	assert len(root.findall(f".//{w('sectPr')}")) == layout.total_pages
	for table in tables:
		rows = table.findall(w("tr"))
		assert len(rows) == layout.max_rows
		for row in rows:
			assert len(row.findall(w("tc"))) == layout.max_cols


#============================================
def test_table_geometry() -> None:
	"""
	Tables span the full width, rows have the exact label height and no borders are drawn.
	"""
	spec = spec_builders.build_spec()
	layout, root = _render(spec)
	table = root.find(f".//{w('tbl')}")
	tbl_pr = table.find(w("tblPr"))

	tbl_w = tbl_pr.find(w("tblW"))
	assert tbl_w.get(w("type")) == "pct"
	assert tbl_w.get(w("w")) == str(word_render.FULL_WIDTH_PCT)

	borders = tbl_pr.find(w("tblBorders"))
	assert borders is not None
	assert [edge.get(w("val")) for edge in borders] == ["none"] * len(word_render.BORDER_EDGES)

	expected_twips = layout.actual_label_height / config.MM_PER_INCH * 1440.0
	for row in table.findall(w("tr")):
		height = row.find(f"{w('trPr')}/{w('trHeight')}")
		assert height.get(w("hRule")) == "exact"
		assert float(height.get(w("val"))) == pytest.approx(expected_twips, abs=1.0)
		for cell in row.findall(w("tc")):
			cell_w = cell.find(f"{w('tcPr')}/{w('tcW')}")
			assert cell_w.get(w("type")) == "pct"
			assert cell_w.get(w("w")) == str(word_render.FULL_WIDTH_PCT // layout.max_cols)


#============================================
@pytest.mark.parametrize("alignment", ["left", "center", "right"])
def test_cell_paragraph_formatting(alignment: str) -> None:
	"""
	Cell paragraphs carry alignment, font, size and line spacing.
	"""
	spec = spec_builders.build_spec(
		content="Line one\nLine two",
		max_lines=2,
		font_size=9.0,
		line_height=1.5,
		alignment=alignment,
	)
	layout, root = _render(spec)
	cell = root.find(f".//{w('tc')}")
	paragraphs = cell.findall(w("p"))
	assert len(paragraphs) == 1
	paragraph = paragraphs[0]

	p_pr = paragraph.find(w("pPr"))
	assert p_pr.find(w("jc")).get(w("val")) == alignment
	spacing = p_pr.find(w("spacing"))
	assert spacing.get(w("line")) == "360"
	assert spacing.get(w("lineRule")) == "auto"

	runs = [run for run in paragraph.findall(w("r")) if run.find(w("t")) is not None]
	assert [run.find(w("t")).text for run in runs] == list(layout.content_lines)
	for run in runs:
		r_pr = run.find(w("rPr"))
		assert r_pr.find(w("rFonts")).get(w("ascii")) == "Arial"
		assert r_pr.find(w("rFonts")).get(w("eastAsia")) == "Arial"
		assert r_pr.find(w("sz")).get(w("val")) == "18"
	assert len(paragraph.findall(f".//{w('br')}")) == len(layout.content_lines) - 1


#============================================
def test_every_cell_repeats_content() -> None:
	"""
	All cells of all pages carry the content block, independent of count.
	"""
	spec = spec_builders.build_spec(count=28)
	layout, root = _render(spec)
	texts = [node.text for node in root.iter(w("t"))]
	assert len(texts) == layout.total_pages * layout.labels_per_page
	assert set(texts) == {"ABC"}


#============================================
def test_sections_are_a4_with_spec_margins() -> None:
	"""
	Every section uses A4 and the label spec margins.
	"""
	spec = spec_builders.build_spec(count=60, margin=12.0)
	layout = layout_lib.compute_layout(spec)
	document = word_render.build_word_document(spec, layout)
	assert len(document.sections) == layout.total_pages
	for section in document.sections:
		assert section.page_width.mm == pytest.approx(210.0, abs=0.1)
		assert section.page_height.mm == pytest.approx(297.0, abs=0.1)
		assert section.left_margin.mm == pytest.approx(12.0, abs=0.1)
		assert section.top_margin.mm == pytest.approx(12.0, abs=0.1)


#============================================
def test_missing_or_stale_layout() -> None:
	"""
	Rendering without a current layout is a precondition failure.
	"""
	spec = spec_builders.build_spec()
	with pytest.raises(label_sheet_maker.errors.PreconditionFailure):
		asyncio.run(word_render.render_word(spec, None))

	layout = layout_lib.compute_layout(spec)
	changed = spec_builders.build_spec(alignment="right")
	with pytest.raises(label_sheet_maker.errors.PreconditionFailure):
		word_render.build_word_document(changed, layout)


#============================================
def test_write_word(tmp_path) -> None:
	"""
	write_word saves a readable .docx package.
	"""
	spec = spec_builders.build_spec(count=3)
	layout = layout_lib.compute_layout(spec)
	output_path = tmp_path / "labels.docx"
	size = word_render.write_word(spec, layout, output_path)
	assert output_path.stat().st_size == size
	assert zipfile.is_zipfile(output_path)


#============================================
@pytest.mark.parametrize("count", [1, 31])
def test_break_paragraphs_are_collapsed(count: int) -> None:
	"""
	Paragraphs between and after the tables are hidden 1pt lines.
	"""
	spec = spec_builders.build_spec(count=count, height=28.0, margin=8.5)
	layout, root = _render(spec)
	# rows exactly fill the usable height
	assert layout.max_rows * layout.actual_label_height == pytest.approx(layout.usable_height)

	body = root.find(w("body"))
	assert body[-2].tag == w("p")
	paragraphs = body.findall(w("p"))
	assert len(paragraphs) == layout.total_pages
	for paragraph in paragraphs:
		assert paragraph.find(w("r")) is None
		p_pr = paragraph.find(w("pPr"))
		spacing = p_pr.find(w("spacing"))
		assert spacing.get(w("line")) == "20"
		assert spacing.get(w("lineRule")) == "exact"
		mark_pr = p_pr.find(w("rPr"))
		assert mark_pr.find(w("vanish")) is not None
		assert mark_pr.find(w("sz")).get(w("val")) == str(word_render.BREAK_MARK_HALF_POINTS)
		section = p_pr.find(w("sectPr"))
		if section is not None:
			children = list(p_pr)
			assert children.index(mark_pr) < children.index(section)


#============================================
def test_invalid_xml_content_is_a_rendering_failure() -> None:
	"""
	Content python-docx cannot store comes back as RenderingFailure.
	"""
	spec = spec_builders.build_spec(content="A\x0bB")
	layout = layout_lib.compute_layout(spec)
	with pytest.raises(label_sheet_maker.errors.RenderingFailure) as excinfo:
		asyncio.run(word_render.render_word(spec, layout))
	assert "Word document build failed" in str(excinfo.value)


#============================================
def test_packaging_errors_are_rendering_failures(monkeypatch) -> None:
	"""
	Errors while saving the package come back as RenderingFailure.
	"""
	def broken_save(self, stream) -> None:
		raise OSError("disk full")

	monkeypatch.setattr(docx.document.Document, "save", broken_save)
	spec = spec_builders.build_spec()
	layout = layout_lib.compute_layout(spec)
	with pytest.raises(label_sheet_maker.errors.RenderingFailure) as excinfo:
		word_render.package_word(spec, layout)
	assert "disk full" in str(excinfo.value)
