"""Service layer: every public method returns a ServiceResult."""
