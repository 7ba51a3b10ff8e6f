"""
Scaled raster preview of the first page of a layout.
"""

# Standard Library
import pathlib

# PIP3 modules
import PIL.Image
import PIL.ImageDraw
import PIL.ImageFont

# local repo modules
import label_sheet_maker as lsm
import label_sheet_maker.config
import label_sheet_maker.layout


LabelSpec = lsm.config.LabelSpec
LayoutDescriptor = lsm.config.LayoutDescriptor

PREVIEW_PIXELS_PER_MM = lsm.config.PREVIEW_PIXELS_PER_MM

PAGE_BORDER_COLOR = (120, 120, 120)
MARGIN_COLOR = (200, 220, 255)
CELL_COLOR = (180, 180, 180)
TEXT_COLOR = (0, 0, 0)


#============================================
def render_preview(
	spec: LabelSpec,
	layout: LayoutDescriptor | None,
	scale: float = PREVIEW_PIXELS_PER_MM,
) -> PIL.Image.Image:
	"""
	Draw the first page grid with its label content.

	Args:
		spec: Label spec.
		layout: Layout computed for this spec.
		scale: Pixels per millimetre.

	Returns:
		RGB preview image.
	"""
	layout = lsm.layout.require_current_layout(spec, layout)

	def px(value: float) -> int:
		return int(round(value * scale))

	image = PIL.Image.new("RGB", (px(layout.page_width), px(layout.page_height)), (255, 255, 255))
	draw = PIL.ImageDraw.Draw(image)
	draw.rectangle((0, 0, image.width - 1, image.height - 1), outline=PAGE_BORDER_COLOR)
	draw.rectangle(
		(
			px(spec.margin.left),
			px(spec.margin.top),
			px(spec.margin.left + layout.usable_width),
			px(spec.margin.top + layout.usable_height),
		),
		outline=MARGIN_COLOR,
	)

	text_size = max(1, px(lsm.config.points_to_mm(spec.font_size)))
	font = PIL.ImageFont.load_default(size=text_size)
	line_step = spec.font_size * spec.line_height

	for placement in lsm.layout.iter_label_placements(spec, layout):
		if placement.page > 0:
			break
		box = (
			px(placement.x),
			px(placement.y),
			px(placement.x + spec.label_size.width),
			px(placement.y + layout.actual_label_height),
		)
		draw.rectangle(box, outline=CELL_COLOR)
		for index, line in enumerate(layout.content_lines):
			if not line:
				continue
			text_width = draw.textlength(line, font=font)
			if spec.alignment == "center":
				text_x = box[0] + (box[2] - box[0] - text_width) / 2.0
			elif spec.alignment == "right":
				text_x = box[2] - text_width
			else:
				text_x = box[0]
			draw.text((text_x, px(placement.y + index * line_step)), line, fill=TEXT_COLOR, font=font)
	return image


#============================================
def write_preview(
	spec: LabelSpec,
	layout: LayoutDescriptor | None,
	output_path: pathlib.Path,
	scale: float = PREVIEW_PIXELS_PER_MM,
) -> PIL.Image.Image:
	"""
	Render the preview and save it as PNG.

	Args:
		spec: Label spec.
		layout: Layout computed for this spec.
		output_path: Output PNG path.
		scale: Pixels per millimetre.

	Returns:
		The saved image.
	"""
	image = render_preview(spec, layout, scale)
	image.save(str(output_path), format="PNG")
	return image
