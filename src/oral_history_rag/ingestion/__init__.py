"""
Ingestion — document loading, chunking, and embedding into the corpus artifact.

This module is responsible for the offline pipeline that converts raw
transcripts (PDF or form-feed delimited text) into token-bounded chunks,
embeds them, and writes the JSON corpus the similarity index loads.
"""
