"""Appointment booking with a Firestore-backed availability calendar."""
