from dataclasses import dataclass
from typing import List, Optional, Protocol


@dataclass
class AvailabilityDto:
    id: int
    doctor_id: int
    day_of_week: int
    start_time: str
    end_time: str


class AvailabilityRepository(Protocol):
    def list_for_doctor(self, doctor_id: int) -> List[AvailabilityDto]:
        ...

    def list_for_day(self, doctor_id: int, day_of_week: int) -> List[AvailabilityDto]:
        ...

    def get_by_id(self, slot_id: int) -> Optional[AvailabilityDto]:
        ...

    def create(self, doctor_id: int, day_of_week: int, start_time: str, end_time: str) -> AvailabilityDto:
        """Raises DuplicateKeyError when (doctor, day, start) already exists."""
        ...

    def update_times(self, slot_id: int, start_time: str, end_time: str) -> Optional[AvailabilityDto]:
        ...

    def delete(self, slot_id: int) -> bool:
        ...
