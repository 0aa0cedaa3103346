"""Map synthesised text boxes from image pixels onto the rendered image.

Boxes come out of :mod:`vision_tool.synthesizer` in the image's intrinsic
(natural) pixel space.  Wherever the image is shown at a different size the
boxes have to be rescaled.  Horizontal and vertical scale are computed
separately: an image stretched to fill its box gets stretched overlays too.

``remap`` is the pure part.  ``ImageSurface`` and ``OverlayController`` model
the surface that shows the image and keep the overlays in step with it: the
controller recomputes on first load, on every resize and whenever a new set
of boxes arrives, and stops listening once it is closed.
"""

import io
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from PIL import Image, ImageDraw

from vision_tool.synthesizer import TextBlock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageDimensions:
    natural_width: float
    natural_height: float
    displayed_width: float
    displayed_height: float

    @property
    def scale_x(self) -> float:
        return self.displayed_width / self.natural_width

    @property
    def scale_y(self) -> float:
        return self.displayed_height / self.natural_height


@dataclass(frozen=True)
class OverlayBox:
    text: str
    x: float
    y: float
    width: float
    height: float
    confidence: float


def remap(boxes: Sequence[TextBlock], dims: ImageDimensions) -> list[OverlayBox]:
    """Rescale *boxes* from natural to displayed coordinates.

    An empty sequence returns ``[]`` without looking at *dims*.  Otherwise the
    natural dimensions must be non-zero: callers wait for the image to load.
    """
    if not boxes:
        return []

    scale_x = dims.scale_x
    scale_y = dims.scale_y
    logger.debug("Remapping %d box(es), scale %.4f x %.4f", len(boxes), scale_x, scale_y)
    return [
        OverlayBox(
            text=box.text,
            x=box.x * scale_x,
            y=box.y * scale_y,
            width=box.width * scale_x,
            height=box.height * scale_y,
            confidence=box.confidence,
        )
        for box in boxes
    ]


# ── Hosting surface ────────────────────────────────────────────────────────────

Listener = Callable[[ImageDimensions], None]


class Subscription:
    """Handle returned by :class:`ImageSurface` registrations.

    ``cancel()`` removes the listener.  Calling it more than once is harmless.
    """

    def __init__(
        self,
        listeners: list,
        listener: Listener,
        on_cancel: Optional[Callable[["Subscription"], None]] = None,
    ) -> None:
        self._listeners = listeners
        self._listener = listener
        self._on_cancel = on_cancel
        self.active = True

    def cancel(self) -> None:
        if not self.active:
            return
        self.active = False
        if self._listener in self._listeners:
            self._listeners.remove(self._listener)
        if self._on_cancel is not None:
            self._on_cancel(self)


class ImageSurface:
    """Something that renders one image and knows its natural and shown size.

    Natural dimensions are set once by :meth:`load`; displayed dimensions
    change with every :meth:`resize`.  Change listeners only hear about
    resizes once the image has loaded.
    """

    def __init__(self) -> None:
        self._natural = (0, 0)
        self._displayed = (0, 0)
        self._ready_listeners: list[Listener] = []
        self._change_listeners: list[Listener] = []
        self._subscriptions: list[Subscription] = []

    @property
    def loaded(self) -> bool:
        return self._natural[0] > 0 and self._natural[1] > 0

    @property
    def dimensions(self) -> ImageDimensions:
        return ImageDimensions(*self._natural, *self._displayed)

    @property
    def subscriptions(self) -> tuple[Subscription, ...]:
        """Handles that have not been cancelled yet."""
        return tuple(self._subscriptions)

    def load(
        self,
        natural_width: float,
        natural_height: float,
        displayed_width: Optional[float] = None,
        displayed_height: Optional[float] = None,
    ) -> None:
        """Record the decoded size.

        Shown size defaults to the size of an earlier :meth:`resize`, or to
        the natural size if there was none.
        """
        if displayed_width is None or displayed_height is None:
            displayed_width, displayed_height = (
                self._displayed if self._displayed != (0, 0) else (natural_width, natural_height)
            )
        self._natural = (natural_width, natural_height)
        self._displayed = (displayed_width, displayed_height)
        if self.loaded:
            self._notify(self._ready_listeners)

    def resize(self, displayed_width: float, displayed_height: float) -> None:
        if (displayed_width, displayed_height) == self._displayed:
            return
        self._displayed = (displayed_width, displayed_height)
        if not self.loaded:
            logger.debug("Resize before load; holding %gx%g", displayed_width, displayed_height)
            return
        self._notify(self._change_listeners)

    def on_ready(self, listener: Listener) -> Subscription:
        """Call *listener* once the image has loaded (immediately if it has)."""
        subscription = self._register(self._ready_listeners, listener)
        if self.loaded:
            listener(self.dimensions)
        return subscription

    def on_dimension_change(self, listener: Listener) -> Subscription:
        return self._register(self._change_listeners, listener)

    def teardown(self) -> None:
        """Cancel every subscription still attached to this surface."""
        for subscription in list(self._subscriptions):
            subscription.cancel()

    def _register(self, listeners: list[Listener], listener: Listener) -> Subscription:
        listeners.append(listener)
        subscription = Subscription(listeners, listener, on_cancel=self._subscriptions.remove)
        self._subscriptions.append(subscription)
        return subscription

    def _notify(self, listeners: list[Listener]) -> None:
        dims = self.dimensions
        for listener in list(listeners):
            listener(dims)


class OverlayController:
    """Keeps display-space overlays for one surface up to date.

    *on_update* receives the freshly remapped boxes each time they change.
    """

    def __init__(
        self,
        surface: ImageSurface,
        on_update: Callable[[list[OverlayBox]], None],
        boxes: Sequence[TextBlock] = (),
    ) -> None:
        self.surface = surface
        self.on_update = on_update
        self.boxes: list[TextBlock] = list(boxes)
        self.overlays: list[OverlayBox] = []
        self._subscriptions = [
            surface.on_ready(self._recompute),
            surface.on_dimension_change(self._on_dimension_change),
        ]

    def set_boxes(self, boxes: Sequence[TextBlock]) -> None:
        """Replace the boxes wholesale (e.g. after a new recognition run)."""
        self.boxes = list(boxes)
        self.refresh()

    def refresh(self) -> None:
        if not self.boxes:
            self._publish([])
        elif self.surface.loaded:
            self._recompute(self.surface.dimensions)
        else:
            logger.debug("Image not loaded yet; deferring overlay recompute")

    def close(self) -> None:
        for subscription in self._subscriptions:
            subscription.cancel()

    def __enter__(self) -> "OverlayController":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _on_dimension_change(self, dims: ImageDimensions) -> None:
        if not self.surface.loaded:
            logger.debug("Dimension change before load; deferring overlay recompute")
            return
        self._recompute(dims)

    def _recompute(self, dims: ImageDimensions) -> None:
        self._publish(remap(self.boxes, dims))

    def _publish(self, overlays: list[OverlayBox]) -> None:
        self.overlays = overlays
        self.on_update(overlays)


# ── Rendering ──────────────────────────────────────────────────────────────────

HIGHLIGHT_RGB = (250, 204, 21)


def draw_overlays(image_bytes: bytes, boxes: Sequence[OverlayBox]) -> bytes:
    """Draw *boxes* as translucent yellow rectangles and return PNG bytes.

    Box coordinates must already be in the pixel space of *image_bytes*.
    """
    base = Image.open(io.BytesIO(image_bytes)).convert("RGBA")
    layer = Image.new("RGBA", base.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)
    for box in boxes:
        left, top = round(box.x), round(box.y)
        right = left + max(1, round(box.width)) - 1
        bottom = top + max(1, round(box.height)) - 1
        draw.rectangle(
            (left, top, right, bottom),
            fill=HIGHLIGHT_RGB + (51,),
            outline=HIGHLIGHT_RGB + (255,),
            width=2,
        )
    buf = io.BytesIO()
    Image.alpha_composite(base, layer).save(buf, format="PNG")
    return buf.getvalue()
