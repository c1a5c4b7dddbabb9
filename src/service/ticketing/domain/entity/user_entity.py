from datetime import datetime
from typing import Optional

import attrs


@attrs.define
class User:
    """Ticket holder resolved (or created) from the phone given at checkout"""

    phone: str
    name: str = ''
    email: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
