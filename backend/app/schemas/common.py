from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator

from app.services.validation_service import as_utc

# Instants (clock times, audit and creation stamps). SQLite hands them back
# naive; they are always emitted with a +00:00 offset.
UtcDateTime = Annotated[datetime, AfterValidator(as_utc)]
