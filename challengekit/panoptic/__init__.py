"""Panoptic UI-testing integration: types, config building, CLI runs, result parsing, evaluators and plugin."""