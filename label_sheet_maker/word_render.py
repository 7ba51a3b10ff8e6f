"""
Word (.docx) rendering of a computed label layout.

Each page is one section holding a borderless table with one cell per label
slot. Every cell carries the same content block and the table is repeated
for every page, so the last page is always full even when count is not a
multiple of labels_per_page.
"""

# Standard Library
import asyncio
import io
import pathlib

# PIP3 modules
import docx
import docx.document
import docx.enum.section
import docx.enum.table
import docx.enum.text
import docx.oxml
import docx.oxml.ns
import docx.shared

# local repo modules
import label_sheet_maker as lsm
import label_sheet_maker.config
import label_sheet_maker.errors
import label_sheet_maker.layout


LabelSpec = lsm.config.LabelSpec
LayoutDescriptor = lsm.config.LayoutDescriptor
RenderingFailure = lsm.errors.RenderingFailure
qn = docx.oxml.ns.qn

# Word percentages are stored in fiftieths of a percent
FULL_WIDTH_PCT = 5000

ALIGNMENT_MAP = {
	"left": docx.enum.text.WD_ALIGN_PARAGRAPH.LEFT,
	"center": docx.enum.text.WD_ALIGN_PARAGRAPH.CENTER,
	"right": docx.enum.text.WD_ALIGN_PARAGRAPH.RIGHT,
}

TBL_BORDERS_SUCCESSORS = ("w:shd", "w:tblLayout", "w:tblCellMar", "w:tblLook", "w:tblCaption", "w:tblDescription")
TBL_W_SUCCESSORS = ("w:jc", "w:tblCellSpacing", "w:tblInd", "w:tblBorders") + TBL_BORDERS_SUCCESSORS
BORDER_EDGES = ("top", "left", "bottom", "right", "insideH", "insideV")
PARAGRAPH_MARK_SUCCESSORS = ("w:sectPr", "w:pPrChange")
BREAK_MARK_HALF_POINTS = 2


#============================================
def _insert_child(parent, child, successors: tuple[str, ...]) -> None:
	"""
	Insert an OOXML child ahead of the first successor present.

	Args:
		parent: Parent element.
		child: New child element.
		successors: Tags that must follow the child.
	"""
	for tag in successors:
		successor = parent.find(qn(tag))
		if successor is not None:
			successor.addprevious(child)
			return
	parent.append(child)


#============================================
def set_pct_width(parent, tag: str, pct: int, successors: tuple[str, ...] = ()) -> None:
	"""
	Set a percentage width element such as w:tblW or w:tcW.

	Args:
		parent: tblPr or tcPr element.
		tag: Width element tag.
		pct: Width in fiftieths of a percent.
		successors: Tags that must follow the width element.
	"""
	element = parent.find(qn(tag))
	if element is None:
		element = docx.oxml.OxmlElement(tag)
		_insert_child(parent, element, successors)
	element.set(qn("w:type"), "pct")
	element.set(qn("w:w"), str(pct))


#============================================
def remove_table_borders(table) -> None:
	"""
	Replace the table borders with explicit "none" borders.

	Args:
		table: python-docx table.
	"""
	tbl_pr = table._tbl.tblPr
	existing = tbl_pr.find(qn("w:tblBorders"))
	if existing is not None:
		tbl_pr.remove(existing)
	borders = docx.oxml.OxmlElement("w:tblBorders")
	for edge in BORDER_EDGES:
		border = docx.oxml.OxmlElement(f"w:{edge}")
		border.set(qn("w:val"), "none")
		border.set(qn("w:sz"), "0")
		border.set(qn("w:space"), "0")
		border.set(qn("w:color"), "auto")
		borders.append(border)
	_insert_child(tbl_pr, borders, TBL_BORDERS_SUCCESSORS)


#============================================
def setup_section(section, spec: LabelSpec, layout: LayoutDescriptor) -> None:
	section.page_width = docx.shared.Mm(layout.page_width)
	section.page_height = docx.shared.Mm(layout.page_height)
	section.orientation = docx.enum.section.WD_ORIENT.PORTRAIT
	section.top_margin = docx.shared.Mm(spec.margin.top)
	section.right_margin = docx.shared.Mm(spec.margin.right)
	section.bottom_margin = docx.shared.Mm(spec.margin.bottom)
	section.left_margin = docx.shared.Mm(spec.margin.left)


#============================================
def fill_label_cell(cell, spec: LabelSpec, layout: LayoutDescriptor, cell_pct: int) -> None:
	"""
	Write the content block into one table cell.

	Args:
		cell: python-docx cell.
		spec: Label spec.
		layout: Layout descriptor.
		cell_pct: Cell width in fiftieths of a percent.
	"""
	set_pct_width(cell._tc.get_or_add_tcPr(), "w:tcW", cell_pct)
	paragraph = cell.paragraphs[0]
	paragraph.alignment = ALIGNMENT_MAP[spec.alignment]
	paragraph_format = paragraph.paragraph_format
	paragraph_format.line_spacing = spec.line_height
	paragraph_format.space_before = docx.shared.Pt(0)
	paragraph_format.space_after = docx.shared.Pt(0)

	last_index = len(layout.content_lines) - 1
	for index, line in enumerate(layout.content_lines):
		run = paragraph.add_run(line)
		run.font.name = spec.font
		run.font.size = docx.shared.Pt(spec.font_size)
		# east asian glyphs take their font from w:eastAsia
		run._element.get_or_add_rPr().get_or_add_rFonts().set(qn("w:eastAsia"), spec.font)
		if index < last_index:
			run.add_break()


#============================================
def add_label_table(document: docx.document.Document, spec: LabelSpec, layout: LayoutDescriptor) -> None:
	"""
	Append one page worth of label cells as a borderless table.

	Args:
		document: python-docx document.
		spec: Label spec.
		layout: Layout descriptor.
	"""
	table = document.add_table(rows=layout.max_rows, cols=layout.max_cols)
	table.autofit = False
	set_pct_width(table._tbl.tblPr, "w:tblW", FULL_WIDTH_PCT, TBL_W_SUCCESSORS)
	remove_table_borders(table)

	cell_pct = FULL_WIDTH_PCT // layout.max_cols
	for row in table.rows:
		row.height = docx.shared.Mm(layout.actual_label_height)
		row.height_rule = docx.enum.table.WD_ROW_HEIGHT_RULE.EXACTLY
		for cell in row.cells:
			fill_label_cell(cell, spec, layout, cell_pct)


#============================================
def _shrink_break_paragraph(paragraph) -> None:
	"""
	Collapse a paragraph that sits between or after label tables.

	The paragraph gets no spacing, a 1pt exact line and a hidden 1pt
	paragraph mark, so a table that fills the usable height does not push
	it onto a blank page.

	Args:
		paragraph: python-docx paragraph.
	"""
	paragraph_format = paragraph.paragraph_format
	paragraph_format.space_before = docx.shared.Pt(0)
	paragraph_format.space_after = docx.shared.Pt(0)
	paragraph_format.line_spacing = docx.shared.Pt(1)
	paragraph_format.line_spacing_rule = docx.enum.text.WD_LINE_SPACING.EXACTLY

	p_pr = paragraph._p.get_or_add_pPr()
	mark_pr = docx.oxml.OxmlElement("w:rPr")
	vanish = docx.oxml.OxmlElement("w:vanish")
	size = docx.oxml.OxmlElement("w:sz")
	size.set(qn("w:val"), str(BREAK_MARK_HALF_POINTS))
	mark_pr.append(vanish)
	mark_pr.append(size)
	_insert_child(p_pr, mark_pr, PARAGRAPH_MARK_SUCCESSORS)


#============================================
def build_word_document(spec: LabelSpec, layout: LayoutDescriptor | None) -> docx.document.Document:
	"""
	Build a Word document with one label table per page.

	Args:
		spec: Label spec.
		layout: Layout computed for this spec.

	Returns:
		python-docx Document.
	"""
	layout = lsm.layout.require_current_layout(spec, layout)
	try:
		document = docx.Document()
		setup_section(document.sections[0], spec, layout)
		for page_index in range(layout.total_pages):
			if page_index > 0:
				section = document.add_section(docx.enum.section.WD_SECTION.NEW_PAGE)
				setup_section(section, spec, layout)
				# add_section leaves the previous section's properties in a paragraph
				_shrink_break_paragraph(document.paragraphs[-1])
			add_label_table(document, spec, layout)
		# a document body cannot end on a table
		_shrink_break_paragraph(document.add_paragraph())
	except Exception as error:
		raise RenderingFailure(f"Word document build failed: {error}") from error
	return document


#============================================
def package_word(spec: LabelSpec, layout: LayoutDescriptor | None) -> bytes:
	"""
	Build a Word document and serialize it to .docx bytes.

	Args:
		spec: Label spec.
		layout: Layout computed for this spec.

	Returns:
		.docx file bytes.
	"""
	document = build_word_document(spec, layout)
	buffer = io.BytesIO()
	try:
		document.save(buffer)
	except Exception as error:
		raise RenderingFailure(f"Word packaging failed: {error}") from error
	return buffer.getvalue()


#============================================
async def render_word(spec: LabelSpec, layout: LayoutDescriptor | None) -> bytes:
	"""
	Render the Word document off the calling thread.

	Args:
		spec: Label spec.
		layout: Layout computed for this spec.

	Returns:
		.docx file bytes.
	"""
	layout = lsm.layout.require_current_layout(spec, layout)
	return await asyncio.to_thread(package_word, spec, layout)


#============================================
def write_word(spec: LabelSpec, layout: LayoutDescriptor | None, output_path: pathlib.Path) -> int:
	"""
	Render a Word document and write it to disk.

	Args:
		spec: Label spec.
		layout: Layout computed for this spec.
		output_path: Output .docx path.

	Returns:
		Number of bytes written.
	"""
	data = asyncio.run(render_word(spec, layout))
	output_path.write_bytes(data)
	return len(data)
