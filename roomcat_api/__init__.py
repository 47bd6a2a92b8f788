"""HTTP export service for RoomPlan catalog tools."""
