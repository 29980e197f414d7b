"""Message Converters

Converts between the JSON payloads carried over gRPC and the pydantic
schemas. The service is registered with generic method handlers, so
messages travel as UTF-8 JSON documents instead of compiled protobufs.
"""

from provisioner.app.schemas.database import ProvisionRequest, ProvisionResult

SERVICE_NAME = "provisioner.Provisioner"
PROVISION_DATABASE = "ProvisionDatabase"
PROVISION_DATABASE_PATH = f"/{SERVICE_NAME}/{PROVISION_DATABASE}"


class MessageConverter:
    """Converts between wire payloads and schema objects."""

    @staticmethod
    def request_from_bytes(data: bytes) -> ProvisionRequest:
        """Parse a ProvisionDatabase request.

        Raises:
            pydantic.ValidationError: If the payload is not valid JSON or
                does not match the request schema
        """
        return ProvisionRequest.model_validate_json(data)

    @staticmethod
    def request_to_bytes(request: ProvisionRequest) -> bytes:
        return request.model_dump_json().encode("utf-8")

    @staticmethod
    def result_from_bytes(data: bytes) -> ProvisionResult:
        return ProvisionResult.model_validate_json(data)

    @staticmethod
    def result_to_bytes(result: ProvisionResult) -> bytes:
        return result.model_dump_json().encode("utf-8")
