"""Collection schedule engine: holiday-aware next-collection dates and bin schedules."""
