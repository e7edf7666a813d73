from jurl.stages.navigation import navigate
from jurl.stages.wait import wait_for_condition
from jurl.stages.extraction import extract, summarize
from jurl.stages.screenshot import capture
