"""Signal analysis for the diagnostic engine (weighting, FFT, levels, verdicts).

Modules here operate on NumPy arrays of audio samples: :mod:`filters` holds
the A-weighting approximation cascade, :mod:`fft` the byte spectrum
analyzer, :mod:`features` the level/peak extraction and :mod:`classifier`
the pass/fail decision. They stay free of Qt and audio-device dependencies so
they can be reused in headless runs, automated tests, or GUI panels alike.
"""
