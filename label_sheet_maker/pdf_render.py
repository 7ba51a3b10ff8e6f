"""
PDF rendering of a computed label layout.
"""

# Standard Library
import io
import pathlib

# PIP3 modules
import reportlab.lib.pagesizes
import reportlab.pdfgen.canvas

# local repo modules
import label_sheet_maker as lsm
import label_sheet_maker.config
import label_sheet_maker.errors
import label_sheet_maker.layout
import label_sheet_maker.metrics


LabelSpec = lsm.config.LabelSpec
LayoutDescriptor = lsm.config.LayoutDescriptor
LabelPlacement = lsm.config.LabelPlacement
PdfDocument = lsm.config.PdfDocument
RenderingFailure = lsm.errors.RenderingFailure
MeasureFunc = lsm.layout.MeasureFunc

mm_to_points = lsm.config.mm_to_points
OUTLINE_LINE_WIDTH = lsm.config.OUTLINE_LINE_WIDTH
OUTLINE_GRAY = lsm.config.OUTLINE_GRAY
PROGRESS_BAR_WIDTH = lsm.config.PROGRESS_BAR_WIDTH


#============================================
def print_progress(prefix: str, current: int, total: int) -> None:
	"""
	Print a simple progress bar.

	Args:
		prefix: Label text.
		current: Current count.
		total: Total count.
	"""
	if total <= 0:
		return
	percent = int(round((current / total) * 100.0))
	filled = int(round(PROGRESS_BAR_WIDTH * percent / 100.0))
	bar = "#" * filled + "-" * (PROGRESS_BAR_WIDTH - filled)
	print(f"{prefix} [{bar}] {current}/{total} ({percent}%)", end="\r")


#============================================
def compute_line_x(x: float, label_width: float, text_width: float, alignment: str) -> float:
	"""
	Compute the left edge of a text line inside a label.

	Args:
		x: Label left edge in mm.
		label_width: Label width in mm.
		text_width: Measured line width in mm.
		alignment: "left", "center" or "right".

	Returns:
		Line x position in mm.
	"""
	if alignment == "center":
		return x + (label_width - text_width) / 2.0
	if alignment == "right":
		return x + label_width - text_width
	return x


#============================================
def compute_line_positions(
	spec: LabelSpec,
	layout: LayoutDescriptor,
	placement: LabelPlacement,
	measure: MeasureFunc,
	ascent: float,
) -> list[tuple[str, float, float]]:
	"""
	Compute where each content line of one label is drawn.

	Args:
		spec: Label spec.
		layout: Layout descriptor.
		placement: Label placement.
		measure: Width oracle.
		ascent: Font ascent in mm.

	Returns:
		List of (text, x, baseline_y) in mm from the page's top-left corner.
	"""
	line_step = spec.font_size * spec.line_height
	positions = []
	for index, line in enumerate(layout.content_lines):
		text_width = measure(spec.font, spec.font_size, line)
		text_x = compute_line_x(placement.x, spec.label_size.width, text_width, spec.alignment)
		# line box top sits index * step below the label top
		baseline_y = placement.y + index * line_step + ascent
		positions.append((line, text_x, baseline_y))
	return positions


#============================================
def draw_label_outlines(
	pdf: reportlab.pdfgen.canvas.Canvas,
	spec: LabelSpec,
	layout: LayoutDescriptor,
	slots: int,
) -> None:
	"""
	Draw label outlines on the current page.

	Args:
		pdf: ReportLab canvas.
		spec: Label spec.
		layout: Layout descriptor.
		slots: Number of label slots used on this page.
	"""
	page_height = mm_to_points(layout.page_height)
	pdf.setLineWidth(OUTLINE_LINE_WIDTH)
	pdf.setStrokeColorRGB(OUTLINE_GRAY, OUTLINE_GRAY, OUTLINE_GRAY)

	label_width = mm_to_points(spec.label_size.width)
	label_height = mm_to_points(layout.actual_label_height)
	for slot in range(slots):
		row = slot // layout.max_cols
		col = slot % layout.max_cols
		cell_x = mm_to_points(spec.margin.left) + col * label_width
		cell_y = page_height - mm_to_points(spec.margin.top) - (row + 1) * label_height
		pdf.rect(cell_x, cell_y, label_width, label_height, stroke=1, fill=0)


#============================================
def draw_label(
	pdf: reportlab.pdfgen.canvas.Canvas,
	spec: LabelSpec,
	layout: LayoutDescriptor,
	placement: LabelPlacement,
	measure: MeasureFunc,
	ascent: float,
) -> None:
	"""
	Draw the content lines of one label.

	Args:
		pdf: ReportLab canvas.
		spec: Label spec.
		layout: Layout descriptor.
		placement: Label placement.
		measure: Width oracle.
		ascent: Font ascent in mm.
	"""
	page_height = mm_to_points(layout.page_height)
	for line, text_x, baseline_y in compute_line_positions(spec, layout, placement, measure, ascent):
		lsm.metrics.check_encodable(spec.font, line)
		pdf.drawString(mm_to_points(text_x), page_height - mm_to_points(baseline_y), line)


#============================================
def render_pdf(
	spec: LabelSpec,
	layout: LayoutDescriptor | None,
	measure: MeasureFunc | None = None,
	draw_outlines: bool = False,
	verbose: bool = False,
) -> PdfDocument:
	"""
	Render every label of a spec onto A4 pages.

	Args:
		spec: Label spec.
		layout: Layout computed for this spec.
		measure: Optional width oracle, defaults to the shared metrics.
		draw_outlines: Draw cutting outlines around used slots.
		verbose: Print a progress bar.

	Returns:
		PdfDocument with the PDF bytes.
	"""
	layout = lsm.layout.require_current_layout(spec, layout)
	if measure is None:
		measure = lsm.metrics.measure_width
	font_name = lsm.metrics.resolve_font_name(spec.font)
	ascent = lsm.metrics.measure_ascent(spec.font, spec.font_size)

	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(buffer, pagesize=reportlab.lib.pagesizes.A4)
	pages = 0
	placements = 0
	current_page = -1
	try:
		for placement in lsm.layout.iter_label_placements(spec, layout):
			if placement.page != current_page:
				if current_page >= 0:
					pdf.showPage()
				current_page = placement.page
				pages += 1
				if draw_outlines:
					slots = lsm.layout.labels_on_page(layout, current_page)
					draw_label_outlines(pdf, spec, layout, slots)
				# showPage resets the graphics state
				pdf.setFillColorRGB(0.0, 0.0, 0.0)
				pdf.setFont(font_name, spec.font_size)
			draw_label(pdf, spec, layout, placement, measure, ascent)
			placements += 1
			if verbose:
				print_progress("Drawing labels", placements, spec.count)
		pdf.save()
	except lsm.errors.LabelSheetError:
		raise
	except Exception as error:
		raise RenderingFailure(f"PDF rendering failed: {error}") from error
	if verbose:
		print()

	return PdfDocument(data=buffer.getvalue(), pages=pages, placements=placements)


#============================================
def write_pdf(
	spec: LabelSpec,
	layout: LayoutDescriptor | None,
	output_path: pathlib.Path,
	draw_outlines: bool = False,
	verbose: bool = False,
) -> PdfDocument:
	"""
	Render a PDF and write it to disk.

	Args:
		spec: Label spec.
		layout: Layout computed for this spec.
		output_path: Output PDF path.
		draw_outlines: Draw cutting outlines around used slots.
		verbose: Print a progress bar.

	Returns:
		PdfDocument that was written.
	"""
	document = render_pdf(spec, layout, draw_outlines=draw_outlines, verbose=verbose)
	output_path.write_bytes(document.data)
	return document
