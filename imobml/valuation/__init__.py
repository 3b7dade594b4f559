"""Dataset building and model training for the AVM, TTS and vision-condition models."""
