"""Middleware for the fault capture pipeline."""

from faultcatch.middleware.fault_capture import FaultCaptureMiddleware, halt_response

__all__ = ["FaultCaptureMiddleware", "halt_response"]
