"""Date and tag helpers shared across the tracker."""
