import logging

from google import genai

from lx.core.ports.oracle import OracleError

logger = logging.getLogger(__name__)


class GeminiOracle:
    """Generate code with a Gemini model.

    Implements the ``CodeOracle`` protocol.
    """

    def __init__(self, api_key: str, model: str, client: genai.Client | None = None) -> None:
        self._client = client if client is not None else genai.Client(api_key=api_key)
        self._model = model

    def generate(self, request: str) -> str:
        logger.debug("Sending %d character request to %s", len(request), self._model)
        try:
            response = self._client.models.generate_content(model=self._model, contents=request)
        except Exception as exc:
            raise OracleError(f"Gemini request failed: {exc}") from exc

        text = response.text
        if not text:
            raise OracleError(f"Gemini model {self._model} returned an empty response")
        return text
