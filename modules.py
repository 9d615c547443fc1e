"""
Display names for image-processing modules.

Operations are stored under their canonical name (e.g. 'colorout'). The
style item list shown to users replaces that name with a readable label.
Unknown operations fall back to the canonical name.
"""

MODULE_NAMES = {
    'rawprepare': 'raw black/white point',
    'temperature': 'white balance',
    'highlights': 'highlight reconstruction',
    'demosaic': 'demosaic',
    'exposure': 'exposure',
    'colorin': 'input color profile',
    'colorout': 'output color profile',
    'gamma': 'gamma',
    'basecurve': 'base curve',
    'tonecurve': 'tone curve',
    'levels': 'levels',
    'colorcorrection': 'color correction',
    'colorzones': 'color zones',
    'channelmixer': 'channel mixer',
    'velvia': 'velvia',
    'vibrance': 'vibrance',
    'sharpen': 'sharpen',
    'grain': 'grain',
    'vignette': 'vignetting',
    'splittoning': 'split-toning',
    'monochrome': 'monochrome',
    'invert': 'invert',
    'flip': 'orientation',
    'clipping': 'crop and rotate',
    'lowpass': 'lowpass',
    'highpass': 'highpass',
    'bilat': 'local contrast',
    'shadhi': 'shadows and highlights',
    'nlmeans': 'denoise (non-local means)',
    'watermark': 'watermark',
    'borders': 'framing',
}

ON_LABEL = 'on'
OFF_LABEL = 'off'


def display_name(operation: str) -> str:
    """Get the readable name of a module operation."""
    return MODULE_NAMES.get(operation, operation)


def item_label(operation: str, enabled: bool) -> str:
    """Label for a style item in lists, e.g. 'output color profile (on)'."""
    return f"{display_name(operation)} ({ON_LABEL if enabled else OFF_LABEL})"
