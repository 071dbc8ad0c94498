from storyrun import StepLibrary

steps = StepLibrary("bad")

raise RuntimeError("step module exploded")
