import base64
from typing import Optional

from google import genai
from google.genai import types

from newsletter_studio.config import Settings, get_settings
from newsletter_studio.exceptions import ConfigurationError, EmptyResultError, TransportError
from newsletter_studio.utils import logger


def to_data_uri(image_bytes: bytes, mime_type: str = "image/png") -> str:
    """Encodes raw image bytes as a data: URI for embedding in HTML."""
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


class GeminiClient:
    """
    Thin wrapper around the google-genai SDK for the two calls the app needs:
    (optionally search-grounded) text generation and header image generation.
    """

    def __init__(
        self,
        api_key: Optional[str],
        text_model: str = "gemini-2.5-flash",
        image_model: str = "imagen-4.0-generate-001",
        aspect_ratio: str = "16:9",
        image_mime_type: str = "image/png",
    ):
        if not api_key:
            logger.error("Gemini API key (GEMINI_API_KEY) not found in secrets or environment variables.")
            raise ConfigurationError("GEMINI_API_KEY is required for the Gemini client.")
        self.client = genai.Client(api_key=api_key)
        self.text_model = text_model
        self.image_model = image_model
        self.aspect_ratio = aspect_ratio
        self.image_mime_type = image_mime_type
        logger.info(f"Initialized Gemini client: text model '{text_model}', image model '{image_model}'")

    def generate_text(self, prompt: str, use_search: bool = False) -> str:
        """
        Sends a single prompt and returns the raw text of the answer.
        With use_search=True the model may ground its answer with Google Search.
        """
        config = None
        if use_search:
            config = types.GenerateContentConfig(tools=[types.Tool(google_search=types.GoogleSearch())])

        logger.debug(f"Sending prompt to '{self.text_model}' (search={use_search}, {len(prompt)} chars)")
        try:
            response = self.client.models.generate_content(
                model=self.text_model,
                contents=prompt,
                config=config,
            )
        except Exception as e:
            logger.error(f"Error calling Gemini text model '{self.text_model}': {e}", exc_info=True)
            raise TransportError(str(e)) from e

        return response.text or ""

    def generate_image(self, prompt: str) -> bytes:
        """
        Generates one header image and returns its bytes.
        """
        logger.debug(f"Requesting header image from '{self.image_model}': '{prompt[:200]}'")
        try:
            response = self.client.models.generate_images(
                model=self.image_model,
                prompt=prompt,
                config=types.GenerateImagesConfig(
                    number_of_images=1,
                    output_mime_type=self.image_mime_type,
                    aspect_ratio=self.aspect_ratio,
                ),
            )
        except Exception as e:
            logger.error(f"Error calling Gemini image model '{self.image_model}': {e}", exc_info=True)
            raise TransportError(
                str(e),
                user_message="Failed to generate the header image from the AI. Please try again.",
            ) from e

        generated = response.generated_images[0] if response.generated_images else None
        if generated is None or generated.image is None or not generated.image.image_bytes:
            # Safety-filtered entries come back without an image
            filtered_reason = generated.rai_filtered_reason if generated is not None else None
            logger.warning(f"Image model '{self.image_model}' returned no image bytes (filtered: {filtered_reason})")
            user_message = "The AI returned no images."
            if filtered_reason:
                user_message = f"The AI returned no images. The image was filtered: {filtered_reason}"
            raise EmptyResultError(
                f"image model returned no images (filtered: {filtered_reason})",
                user_message=user_message,
            )
        return generated.image.image_bytes


def get_default_client(settings: Optional[Settings] = None) -> GeminiClient:
    """
    Builds a GeminiClient from application settings. Raises ConfigurationError when no API key is set.
    """
    settings = settings or get_settings()
    return GeminiClient(
        api_key=settings.GEMINI_API_KEY,
        text_model=settings.TEXT_MODEL_NAME,
        image_model=settings.IMAGE_MODEL_NAME,
        aspect_ratio=settings.IMAGE_ASPECT_RATIO,
        image_mime_type=settings.IMAGE_MIME_TYPE,
    )
