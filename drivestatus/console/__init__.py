"""Drive status console - terminal observer for the drive status stream."""
