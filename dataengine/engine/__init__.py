"""
Rendering Engine Module

Resolves values, evaluates conditions and runs the template pipeline.
"""

from dataengine.engine.resolver import LoopRowContext, ValueResolver, traverse, render_terms
from dataengine.engine.conditions import ConditionEvaluator, compare, to_float
from dataengine.engine.processor import Diagnostic, RenderPass, RenderResult, TemplateProcessor

__all__ = [
    'LoopRowContext',
    'ValueResolver',
    'traverse',
    'render_terms',
    'ConditionEvaluator',
    'compare',
    'to_float',
    'Diagnostic',
    'RenderPass',
    'RenderResult',
    'TemplateProcessor'
]
