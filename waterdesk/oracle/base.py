from abc import ABC, abstractmethod


class TextOracle(ABC):
    """Single-shot text generation: one prompt in, one text reply out.

    The oracle keeps no conversation state; callers re-send whatever history
    they want it to see.
    """

    @abstractmethod
    def generate(self, prompt: str, *, response_schema: dict | None = None) -> str:
        """Return the generated text.

        When ``response_schema`` is given the oracle is asked to reply with
        JSON matching it; callers must still tolerate free text.

        Raises:
            OracleConfigError: no credential configured (before any network call)
            OracleSafetyBlocked: the reply was withheld for safety reasons
            OracleRequestError: transport, HTTP or response-shape failure
        """
        ...
