"""Tab widgets for the AcousticDiag GUI."""
