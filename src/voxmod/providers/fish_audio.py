"""Cliente HTTP do provider de clonagem de voz e TTS (Fish Audio).

Os endpoints de modelo vivem na raiz (POST/GET /model, DELETE /model/{id});
os demais, inclusive TTS, sob /v1.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

from voxmod._types import VoiceModelHandle
from voxmod.config.settings import DEFAULT_FISH_AUDIO_BASE_URL
from voxmod.exceptions import (
    ProviderError,
    ProviderRejectedError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)
from voxmod.logging import get_logger

if TYPE_CHECKING:
    from voxmod._types import AudioAsset
    from voxmod.config.presets import TTSProfile

logger = get_logger("providers.fish_audio")

# Status que indicam audio/campos recusados na criacao do modelo
_REJECTION_STATUSES = frozenset({400, 415, 422})

MODEL_DESCRIPTION = "Voice clone created via Culture Voices"
MODEL_TAGS = ("voxmod", "clone")


@dataclass(frozen=True, slots=True)
class ModelCreateForm:
    """Campos multipart da criacao de modelo de voz.

    Os campos fixos refletem o unico modo aceito pelo provider (type=tts,
    train_mode=fast) e a politica de privacidade (visibility=private).
    """

    title: str
    texts: str = ""
    type: str = "tts"
    train_mode: str = "fast"
    visibility: str = "private"
    description: str = MODEL_DESCRIPTION
    enhance_audio_quality: bool = True
    tags: tuple[str, ...] = MODEL_TAGS

    def fields(self) -> dict[str, Any]:
        """Campos de texto do multipart. Listas viram campos repetidos."""
        data: dict[str, Any] = {
            "type": self.type,
            "title": self.title,
            "train_mode": self.train_mode,
            "visibility": self.visibility,
            "description": self.description,
            "enhance_audio_quality": "true" if self.enhance_audio_quality else "false",
            "tags": list(self.tags),
        }
        if self.texts:
            data["texts"] = self.texts
        return data


def _payload(response: httpx.Response) -> Any:
    """Corpo de erro do provider para diagnostico (JSON se possivel)."""
    try:
        return response.json()
    except ValueError:
        return response.text


class FishAudioClient:
    """Wrapper async sobre httpx para a API do provider.

    Cada metodo faz uma unica tentativa; nao ha retry.
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = DEFAULT_FISH_AUDIO_BASE_URL,
        timeout: float | None = 120.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key or ""
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    @property
    def base_url(self) -> str:
        return self._base_url

    def url_for(self, endpoint: str) -> str:
        """Resolve a URL completa de um endpoint.

        /model e /model/{id} nao usam prefixo de versao; todo o resto usa /v1.
        """
        if endpoint.startswith("/model") and not endpoint.startswith("/models"):
            return f"{self._base_url}{endpoint}"
        return f"{self._base_url}/v1{endpoint}"

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {self._api_key}"}
        if extra:
            headers.update(extra)
        return headers

    async def _send(
        self,
        operation: str,
        method: str,
        endpoint: str,
        *,
        rejection_statuses: frozenset[int] = frozenset(),
        **kwargs: Any,
    ) -> httpx.Response:
        url = self.url_for(endpoint)
        logger.info("provider_request", operation=operation, method=method, url=url)
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            logger.error("provider_timeout", operation=operation, timeout_s=self._timeout)
            raise ProviderTimeoutError(operation, self._timeout) from exc
        except httpx.TransportError as exc:
            logger.error("provider_unreachable", operation=operation, error=str(exc))
            raise ProviderUnavailableError(operation, payload=str(exc)) from exc

        if response.is_success:
            return response

        payload = _payload(response)
        logger.error(
            "provider_error",
            operation=operation,
            status_code=response.status_code,
            payload=payload,
        )
        if response.status_code in rejection_statuses:
            raise ProviderRejectedError(operation, response.status_code, payload)
        raise ProviderError(operation, response.status_code, payload)

    async def create_model(self, form: ModelCreateForm, asset: AudioAsset) -> VoiceModelHandle:
        """Cria um modelo de voz a partir de uma amostra de audio.

        Raises:
            ProviderRejectedError: Provider recusou audio ou campos (400/415/422).
            ProviderError: Qualquer outra falha, ou resposta sem identificador.
        """
        with asset.path.open("rb") as audio_file:
            response = await self._send(
                "create_model",
                "POST",
                "/model",
                rejection_statuses=_REJECTION_STATUSES,
                headers=self._headers(),
                data=form.fields(),
                files={"voices": (asset.filename, audio_file, asset.mime_type)},
            )

        body = _payload(response)
        model_id = (body.get("_id") or body.get("id")) if isinstance(body, dict) else None
        if not model_id:
            raise ProviderError("create_model", response.status_code, body)

        state = body.get("state")
        logger.info("model_created", model_id=model_id, state=state or "unknown")
        return VoiceModelHandle(model_id=str(model_id), state=state)

    async def synthesize(self, model_id: str, text: str, profile: TTSProfile) -> bytes:
        """Sintetiza text com a voz model_id; retorna o audio codificado."""
        response = await self._send(
            "synthesize",
            "POST",
            "/tts",
            headers=self._headers({"Content-Type": "application/json", "model": profile.model}),
            json=profile.request_body(model_id, text),
        )
        return response.content

    async def list_models(self, page_size: int = 100) -> Any:
        """Lista os modelos do proprio usuario no provider."""
        response = await self._send(
            "list_models",
            "GET",
            "/model",
            headers=self._headers(),
            params={"page_size": page_size, "self": "true"},
        )
        body = _payload(response)
        if isinstance(body, dict) and "items" in body:
            return body["items"]
        return body

    async def delete_model(self, model_id: str) -> None:
        """Remove um modelo de voz no provider."""
        await self._send(
            "delete_model",
            "DELETE",
            f"/model/{model_id}",
            headers=self._headers(),
        )
        logger.info("model_deleted", model_id=model_id)

    async def aclose(self) -> None:
        """Fecha o cliente httpx, se pertencer a esta instancia."""
        if self._owns_client:
            await self._http.aclose()
