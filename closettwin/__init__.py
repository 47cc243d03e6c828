"""ClosetTwin — garment fit evaluation."""
