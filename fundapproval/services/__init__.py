"""Client-side services: API access, form state, rendering and view resolution"""
