"""Image Generation Service - local stable-diffusion CLI (sd-z / stable-diffusion.cpp)."""

import logging
from pathlib import Path

from utils.errors import ExternalToolError
from utils.process import DEFAULT_TIMEOUT, run_command, split_command

logger = logging.getLogger(__name__)


class ImageGenerationService:
    """Generates one PNG per prompt with an external image synthesis process.

    The configured command carries the model flags; prompt, size and output
    path are appended per call.
    """

    def __init__(
        self,
        command: str,
        width: int = 480,
        height: int = 640,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize the image generation service.

        Args:
            command: Base synthesis command, e.g. ``sd-z --diffusion-model ... --steps 8``
            width: Output image width in pixels
            height: Output image height in pixels
            timeout: Seconds allowed for one generation
        """
        self.base_cmd = split_command(command)
        self.width = width
        self.height = height
        self.timeout = timeout

    def build_command(self, prompt: str, output_path: Path) -> list[str]:
        return [
            *self.base_cmd,
            "-H", str(self.height),
            "-W", str(self.width),
            "-p", prompt,
            "-o", str(output_path),
        ]

    def generate(self, prompt: str, output_path: Path) -> None:
        """Generate an image for the prompt at ``output_path``.

        Raises:
            ExternalToolError: If the process fails or writes no image
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        logger.info(f"Generating image ({self.width}x{self.height}): {prompt[:60]}...")
        run_command(
            self.build_command(prompt, output_path),
            description="image synthesis",
            timeout=self.timeout,
        )

        if not output_path.exists():
            raise ExternalToolError(f"Image synthesis produced no file at {output_path}")

        logger.info(f"Image generated: {output_path}")
