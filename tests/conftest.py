import io
from collections.abc import Callable

import pytest
from fastapi import UploadFile


@pytest.fixture
def upload() -> Callable[..., UploadFile]:
	def make(filename: str, content: bytes = b"data") -> UploadFile:
		return UploadFile(file=io.BytesIO(content), filename=filename)

	return make


COUNTER_VUE = """
<template>
  <div class="counter">
    <template v-if="count > 0">
      <span>{{ count }}</span>
    </template>
    <button @click="increment()">+</button>
  </div>
</template>

<style>
.counter { color: red; }
</style>

<script>
return {
  mounted: function() { this.ready = true; }
};
</script>
"""


@pytest.fixture
def counter_vue() -> str:
	return COUNTER_VUE
