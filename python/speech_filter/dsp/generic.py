# Copyright 2024-2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""The generic DSP block."""

import numpy as np
from docstring_inheritance import NumpyDocstringInheritanceInitMeta


class dsp_block(metaclass=NumpyDocstringInheritanceInitMeta):
    """
    Generic mono DSP block, all blocks should inherit from this class
    and implement it's methods.

    By using the metaclass NumpyDocstringInheritanceInitMeta, parameter
    and attribute documentation can be inherited by the child classes.

    Parameters
    ----------
    fs : int
        Sampling frequency in Hz.

    Attributes
    ----------
    fs : int
        Sampling frequency in Hz.
    """

    def __init__(self, fs):
        self.fs = fs
        return

    def process(self, sample: float) -> float:
        """
        Take one new sample and give it back. Do no processing for the
        generic block.

        Parameters
        ----------
        sample : float
            The input sample to be processed.

        Returns
        -------
        float
            The processed sample.
        """
        raise NotImplementedError

    def process_frame(self, frame: np.ndarray) -> np.ndarray:
        """
        Take a frame of samples and return the processed frame.

        A frame is a 1-D numpy array of consecutive samples. State is
        carried between frames, so a signal may be split into frames of
        any size.

        For the generic implementation, just call process for each
        sample.

        Parameters
        ----------
        frame : np.ndarray
            1-D array of input samples.

        Returns
        -------
        np.ndarray
            1-D array of processed samples, the same length as the input.
        """
        frame = np.asarray(frame, dtype=np.float64)
        output = np.zeros_like(frame)
        for n in range(frame.shape[0]):
            output[n] = self.process(float(frame[n]))

        return output

    def reset_state(self):
        """Reset any saved state to zero. The generic block has none."""
        return
