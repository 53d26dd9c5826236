"""Localized user-facing messages for pipeline failures."""

from keto_tracker.domain.inference import Modality

DEFAULT_LOCALE = "es"

_MESSAGES: dict[str, dict[tuple[str, Modality | None], str]] = {
    "es": {
        ("missing_credential", None): (
            "API key no configurada. Ve a Configuración para agregar tu API key "
            "de Groq."
        ),
        ("invalid_credential", None): "API key inválida. Verifica tu API key de Groq.",
        ("rate_limited", None): (
            "Demasiadas solicitudes. Espera un momento e intenta de nuevo."
        ),
        ("rate_limited", Modality.IMAGE): (
            "Servicio ocupado. Intenta de nuevo o describe tu comida con texto."
        ),
        ("invalid_request", None): "No se pudo procesar la solicitud.",
        ("invalid_request", Modality.IMAGE): (
            "Error al analizar imagen. Intenta con texto."
        ),
        ("invalid_request", Modality.AUDIO): (
            "No pude procesar el audio. Intenta grabar de nuevo o usa texto."
        ),
        ("provider_unavailable", None): (
            "El servicio de análisis no está disponible. Intenta más tarde."
        ),
        ("provider_unavailable", Modality.IMAGE): (
            "Error al analizar imagen. Intenta con texto."
        ),
        ("request_timeout", None): (
            "El análisis tardó demasiado. Intenta de nuevo."
        ),
        ("request_timeout", Modality.IMAGE): (
            "El análisis tardó demasiado. Intenta con una foto más simple o con "
            "texto."
        ),
        ("image_load_error", None): (
            "No pude cargar la imagen. Usa la cámara de la app."
        ),
        ("image_too_large", None): (
            "La imagen es muy grande. Intenta con una más pequeña."
        ),
        ("format_unsupported", None): (
            "HEIC no soportado. Usa la cámara de la app o cambia: "
            "Ajustes > Cámara > Formatos > Compatible."
        ),
        ("malformed_response", None): 'No pude procesar. Intenta: "huevo frito"',
        ("malformed_response", Modality.IMAGE): (
            "No pude analizar la imagen. Intenta con texto."
        ),
        ("no_items_detected", None): (
            'No identifiqué alimentos. Intenta: "2 huevos fritos"'
        ),
        ("no_items_detected", Modality.IMAGE): (
            "No se detectaron alimentos claros. Intenta describir tu comida con "
            "texto."
        ),
        ("empty_input", None): "Escribe algo para analizar.",
        ("empty_input", Modality.AUDIO): "Se requiere audio.",
        ("empty_transcription", None): (
            "No pude entender el audio. Intenta hablar más claro."
        ),
        ("analysis_error", None): "Error al procesar. Intenta de nuevo.",
    },
    "en": {
        ("missing_credential", None): (
            "API key not configured. Open Settings to add your Groq API key."
        ),
        ("invalid_credential", None): "Invalid API key. Check your Groq API key.",
        ("rate_limited", None): "Too many requests. Wait a moment and try again.",
        ("rate_limited", Modality.IMAGE): (
            "Service busy. Try again or describe your meal by text."
        ),
        ("invalid_request", None): "The request could not be processed.",
        ("invalid_request", Modality.IMAGE): (
            "Could not analyze the image. Try describing it by text."
        ),
        ("invalid_request", Modality.AUDIO): (
            "Could not process the audio. Record again or use text."
        ),
        ("provider_unavailable", None): (
            "The analysis service is unavailable. Try again later."
        ),
        ("provider_unavailable", Modality.IMAGE): (
            "Could not analyze the image. Try describing it by text."
        ),
        ("request_timeout", None): "The analysis took too long. Try again.",
        ("request_timeout", Modality.IMAGE): (
            "The analysis took too long. Try a simpler photo or use text."
        ),
        ("image_load_error", None): (
            "Could not load the image. Use the in-app camera."
        ),
        ("image_too_large", None): "The image is too large. Try a smaller one.",
        ("format_unsupported", None): (
            "HEIC is not supported. Use the in-app camera or switch to: "
            "Settings > Camera > Formats > Most Compatible."
        ),
        ("malformed_response", None): 'Could not process that. Try: "fried egg"',
        ("malformed_response", Modality.IMAGE): (
            "Could not analyze the image. Try describing it by text."
        ),
        ("no_items_detected", None): 'No foods identified. Try: "2 fried eggs"',
        ("no_items_detected", Modality.IMAGE): (
            "No clear foods detected. Try describing your meal by text."
        ),
        ("empty_input", None): "Type something to analyze.",
        ("empty_input", Modality.AUDIO): "Audio is required.",
        ("empty_transcription", None): (
            "Could not understand the audio. Try speaking more clearly."
        ),
        ("analysis_error", None): "Something went wrong. Try again.",
    },
}


def user_message(code: str, modality: Modality | None, locale: str) -> str:
    """Return the message for an error code, preferring modality-specific text."""
    catalog = _MESSAGES.get(locale) or _MESSAGES[DEFAULT_LOCALE]
    for key in ((code, modality), (code, None), ("analysis_error", None)):
        if key in catalog:
            return catalog[key]
    return catalog[("analysis_error", None)]
