"""Readers for literature data files."""

from exocalc.io.study_reader import load_studies

__all__ = ['load_studies']
