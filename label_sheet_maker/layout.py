"""
Grid packing, validation and pagination for label sheets.
"""

# Standard Library
import math
import typing

# local repo modules
import label_sheet_maker as lsm
import label_sheet_maker.config
import label_sheet_maker.errors
import label_sheet_maker.metrics


LabelSpec = lsm.config.LabelSpec
LayoutDescriptor = lsm.config.LayoutDescriptor
LabelPlacement = lsm.config.LabelPlacement
Violation = lsm.errors.Violation
ValidationFailure = lsm.errors.ValidationFailure
PreconditionFailure = lsm.errors.PreconditionFailure

PAGE_WIDTH_MM = lsm.config.PAGE_WIDTH_MM
PAGE_HEIGHT_MM = lsm.config.PAGE_HEIGHT_MM
MIN_LABEL_SIZE_MM = lsm.config.MIN_LABEL_SIZE_MM
MIN_FONT_SIZE = lsm.config.MIN_FONT_SIZE
MAX_FONT_SIZE = lsm.config.MAX_FONT_SIZE
MIN_LINE_HEIGHT = lsm.config.MIN_LINE_HEIGHT
MAX_LINE_HEIGHT = lsm.config.MAX_LINE_HEIGHT
MIN_MARGIN_MM = lsm.config.MIN_MARGIN_MM

MeasureFunc = typing.Callable[[str, float, str], float]


#============================================
def split_content_lines(content: str, max_lines: int) -> tuple[str, ...]:
	"""
	Split label content into the lines that will be rendered.

	Args:
		content: Raw newline separated content.
		max_lines: Maximum number of lines to keep.

	Returns:
		Tuple of visible lines.
	"""
	lines = content.split("\n")
	return tuple(lines[:max(max_lines, 0)])


#============================================
def compute_content_height(line_count: int, font_size: float, line_height: float) -> float:
	# font size is used directly as millimetres per line
	return line_count * font_size * line_height


#============================================
def floor_fit(available: float, size: float) -> int:
	"""
	Count how many items of a size fit into an available length.

	Args:
		available: Available length.
		size: Item length.

	Returns:
		Item count, 0 when nothing fits or the size is not positive.
	"""
	if size <= 0.0 or available <= 0.0:
		return 0
	return int(math.floor(available / size))


#============================================
def _format_mm(value: float) -> str:
	return f"{value:g}mm"


#============================================
def check_rules(
	spec: LabelSpec,
	content_lines: tuple[str, ...],
	content_height: float,
	measure: MeasureFunc,
) -> list[Violation]:
	"""
	Evaluate the per-spec rules, keeping every violation.

	Args:
		spec: Label spec.
		content_lines: Visible content lines.
		content_height: Height of the text block in mm.
		measure: Width oracle (font, size, text) -> mm.

	Returns:
		Violations in rule order.
	"""
	violations: list[Violation] = []
	width = spec.label_size.width
	height = spec.label_size.height

	if width < MIN_LABEL_SIZE_MM or height < MIN_LABEL_SIZE_MM:
		violations.append(Violation(
			rule="min_label_size",
			message=(
				f"Label is too small: {_format_mm(width)} x {_format_mm(height)}, "
				f"width and height should be at least {_format_mm(MIN_LABEL_SIZE_MM)}"
			),
			values={"width": width, "height": height, "minimum": MIN_LABEL_SIZE_MM},
		))

	line_widths = [measure(spec.font, spec.font_size, line) for line in content_lines]
	max_line_width = max(line_widths, default=0.0)
	if max_line_width > width:
		violations.append(Violation(
			rule="content_width_overflow",
			message=(
				f"Content exceeds label width: longest line needs {max_line_width:.1f}mm "
				f"but label width is {_format_mm(width)} "
				f"(over by {max_line_width - width:.1f}mm)"
			),
			values={"max_line_width": max_line_width, "label_width": width},
		))

	if content_height > height:
		violations.append(Violation(
			rule="content_height_overflow",
			message=(
				f"Content exceeds label height: content needs {content_height:.1f}mm "
				f"but label height is {_format_mm(height)} "
				f"(over by {content_height - height:.1f}mm)"
			),
			values={"content_height": content_height, "label_height": height},
		))

	if spec.font_size < MIN_FONT_SIZE:
		violations.append(Violation(
			rule="font_size_bounds",
			message=f"Font size {spec.font_size:g}pt is too small, use at least {MIN_FONT_SIZE:g}pt",
			values={"font_size": spec.font_size, "minimum": MIN_FONT_SIZE},
		))
	elif spec.font_size > MAX_FONT_SIZE:
		violations.append(Violation(
			rule="font_size_bounds",
			message=f"Font size {spec.font_size:g}pt is too large, use at most {MAX_FONT_SIZE:g}pt",
			values={"font_size": spec.font_size, "maximum": MAX_FONT_SIZE},
		))

	if spec.line_height < MIN_LINE_HEIGHT:
		violations.append(Violation(
			rule="line_height_bounds",
			message=f"Line height {spec.line_height:g} is too small, use at least {MIN_LINE_HEIGHT:g}",
			values={"line_height": spec.line_height, "minimum": MIN_LINE_HEIGHT},
		))
	elif spec.line_height > MAX_LINE_HEIGHT:
		violations.append(Violation(
			rule="line_height_bounds",
			message=f"Line height {spec.line_height:g} is too large, use at most {MAX_LINE_HEIGHT:g}",
			values={"line_height": spec.line_height, "maximum": MAX_LINE_HEIGHT},
		))

	margin = spec.margin
	margins = {"top": margin.top, "right": margin.right, "bottom": margin.bottom, "left": margin.left}
	small = {side: value for side, value in margins.items() if value < MIN_MARGIN_MM}
	if small:
		sides = ", ".join(f"{side} {_format_mm(value)}" for side, value in small.items())
		violations.append(Violation(
			rule="margin_minimum",
			message=f"Margins are too small ({sides}), use at least {_format_mm(MIN_MARGIN_MM)}",
			values={"margins": small, "minimum": MIN_MARGIN_MM},
		))

	return violations


#============================================
def _packing_violation(
	spec: LabelSpec,
	usable_width: float,
	usable_height: float,
	actual_label_height: float,
) -> Violation:
	return Violation(
		rule="packing_feasibility",
		message=(
			f"Label is too large to fit on a page: {_format_mm(spec.label_size.width)} x "
			f"{actual_label_height:.1f}mm in a usable area of "
			f"{_format_mm(usable_width)} x {_format_mm(usable_height)}"
		),
		values={
			"label_width": spec.label_size.width,
			"label_height": actual_label_height,
			"usable_width": usable_width,
			"usable_height": usable_height,
		},
	)


#============================================
def validate_spec(spec: LabelSpec, measure: MeasureFunc | None = None) -> list[Violation]:
	"""
	Collect every rule violation for a spec without raising.

	Args:
		spec: Label spec.
		measure: Optional width oracle, defaults to the shared metrics.

	Returns:
		Violations in rule order, empty when the label spec is valid.
	"""
	try:
		compute_layout(spec, measure)
	except ValidationFailure as failure:
		return list(failure.violations)
	return []


#============================================
def compute_layout(spec: LabelSpec, measure: MeasureFunc | None = None) -> LayoutDescriptor:
	"""
	Compute the grid layout for a label spec.

	Args:
		spec: Label spec.
		measure: Optional width oracle, defaults to the shared metrics.

	Returns:
		LayoutDescriptor.

	Raises:
		ValidationFailure: With every violated rule.
	"""
	if measure is None:
		measure = lsm.metrics.measure_width

	content_lines = split_content_lines(spec.content, spec.max_lines)
	content_height = compute_content_height(len(content_lines), spec.font_size, spec.line_height)
	actual_label_height = max(spec.label_size.height, content_height)

	violations = check_rules(spec, content_lines, content_height, measure)

	margin = spec.margin
	usable_width = PAGE_WIDTH_MM - margin.left - margin.right
	usable_height = PAGE_HEIGHT_MM - margin.top - margin.bottom
	max_cols = floor_fit(usable_width, spec.label_size.width)
	max_rows = floor_fit(usable_height, actual_label_height)
	labels_per_page = max_cols * max_rows
	if labels_per_page == 0:
		violations.append(_packing_violation(spec, usable_width, usable_height, actual_label_height))

	if violations:
		raise ValidationFailure(violations)

	total_pages = math.ceil(spec.count / labels_per_page)
	return LayoutDescriptor(
		spec=spec,
		max_cols=max_cols,
		max_rows=max_rows,
		labels_per_page=labels_per_page,
		total_pages=total_pages,
		actual_label_height=actual_label_height,
		content_height=content_height,
		content_lines=content_lines,
		usable_width=usable_width,
		usable_height=usable_height,
	)


#============================================
def require_current_layout(spec: LabelSpec, layout: LayoutDescriptor | None) -> LayoutDescriptor:
	"""
	Ensure a layout exists and was computed from this spec.

	Args:
		spec: Label spec about to be rendered.
		layout: Layout handed to the renderer.

	Returns:
		The layout.

	Raises:
		PreconditionFailure: If the layout is missing or stale.
	"""
	if layout is None:
		raise PreconditionFailure("Generate the layout before rendering")
	if layout.spec != spec:
		raise PreconditionFailure("Layout is stale: it was computed for a different label spec")
	return layout


#============================================
def iter_label_placements(
	spec: LabelSpec,
	layout: LayoutDescriptor,
) -> typing.Iterator[LabelPlacement]:
	"""
	Walk the page/row/column cursor for every label.

	Args:
		spec: Label spec.
		layout: Layout computed for the label spec.

	Yields:
		LabelPlacement for indices 0 .. count - 1.
	"""
	page = 0
	row = 0
	col = 0
	for index in range(spec.count):
		if row >= layout.max_rows:
			page += 1
			row = 0
			col = 0
		x = spec.margin.left + col * spec.label_size.width
		y = spec.margin.top + row * layout.actual_label_height
		yield LabelPlacement(index=index, page=page, row=row, col=col, x=x, y=y)
		col += 1
		if col >= layout.max_cols:
			col = 0
			row += 1


#============================================
def labels_on_page(layout: LayoutDescriptor, page_index: int) -> int:
	"""
	Count the labels placed on one page.

	Args:
		layout: Layout descriptor.
		page_index: Zero based page index.

	Returns:
		Label count for that page.
	"""
	if page_index < 0 or page_index >= layout.total_pages:
		return 0
	if page_index < layout.total_pages - 1:
		return layout.labels_per_page
	remainder = layout.spec.count % layout.labels_per_page
	if remainder == 0:
		return layout.labels_per_page
	return remainder


#============================================
def layout_summary(spec: LabelSpec, layout: LayoutDescriptor) -> dict:
	"""
	Build a JSON ready description of a layout for previews and manifests.

	Args:
		spec: Label spec.
		layout: Layout computed for the label spec.

	Returns:
		Summary dictionary.
	"""
	layout = require_current_layout(spec, layout)
	return {
		"labels_per_page": layout.labels_per_page,
		"total_pages": layout.total_pages,
		"columns": layout.max_cols,
		"rows": layout.max_rows,
		"total_labels": spec.count,
		"last_page_labels": labels_on_page(layout, layout.total_pages - 1),
		"actual_label_height": layout.actual_label_height,
		"content_height": layout.content_height,
		"content_lines": list(layout.content_lines),
		"page": {
			"width": layout.page_width,
			"height": layout.page_height,
			"usable_width": layout.usable_width,
			"usable_height": layout.usable_height,
		},
		"spec": {
			"label_width": spec.label_size.width,
			"label_height": spec.label_size.height,
			"max_lines": spec.max_lines,
			"font": spec.font,
			"font_size": spec.font_size,
			"line_height": spec.line_height,
			"count": spec.count,
			"alignment": spec.alignment,
			"margin": {
				"top": spec.margin.top,
				"right": spec.margin.right,
				"bottom": spec.margin.bottom,
				"left": spec.margin.left,
			},
		},
	}
