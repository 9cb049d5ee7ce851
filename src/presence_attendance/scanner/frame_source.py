from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import cv2

from ..core.constants import DEFAULT_CAMERA_INDEX
from ..core.exceptions import CameraUnavailableError

logger = logging.getLogger(__name__)


class FrameSource(Protocol):
    """A camera-like source of frames.

    ``open`` raises ``CameraUnavailableError`` when the device cannot be
    acquired; ``read`` returns ``None`` when no frame is ready.
    """

    def open(self) -> None:
        raise NotImplementedError

    def read(self) -> Optional[Any]:
        raise NotImplementedError

    def release(self) -> None:
        raise NotImplementedError

    @property
    def is_open(self) -> bool:
        raise NotImplementedError


class OpenCVFrameSource:
    def __init__(self, device: int | str = DEFAULT_CAMERA_INDEX, *, api_preference: int = cv2.CAP_ANY):
        self._device = device
        self._api_preference = api_preference
        self._cap: Optional[cv2.VideoCapture] = None

    @property
    def is_open(self) -> bool:
        return self._cap is not None

    def open(self) -> None:
        if self._cap is not None:
            return
        cap = cv2.VideoCapture(self._device, self._api_preference)
        if not cap.isOpened():
            cap.release()
            raise CameraUnavailableError(f"Unable to access camera: cannot open device {self._device!r}")
        self._cap = cap
        logger.info("camera %r opened", self._device)

    def read(self) -> Optional[Any]:
        if self._cap is None:
            return None
        ok, frame = self._cap.read()
        return frame if ok else None

    def release(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.info("camera %r released", self._device)
